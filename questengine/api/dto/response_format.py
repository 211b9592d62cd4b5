# questengine/api/dto/response_format.py
# Document d'erreur renvoyé au client pour les requêtes de quiz invalides.

from typing import Any, Union

from pydantic import BaseModel

MALFORMED_ANSWER = "MALFORMED_ANSWER"
QUESTION_NOT_FOUND = "QUESTION_NOT_FOUND"
QUESTION_ALREADY_ANSWERED = "QUESTION_ALREADY_ANSWERED"
MISSION_CLOSED = "MISSION_CLOSED"
NO_QUESTION_LEFT = "NO_QUESTION_LEFT"


class ErrorResponse(BaseModel):
    """Format standardisé pour les réponses d'erreur."""

    success: bool = False
    error: dict[str, Any]

    @classmethod
    def from_detail(cls, detail: Union[str, dict[str, Any]], code: str = MALFORMED_ANSWER):
        """Créer une réponse d'erreur à partir d'un détail."""
        if isinstance(detail, str):
            return cls(error={"code": code, "message": detail})
        return cls(error={"code": code, **detail})

    @property
    def code(self) -> str:
        return self.error.get("code", "")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump()
