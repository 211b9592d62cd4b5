# questengine/models/quiz.py
# Modèles du protocole de quiz : question générée, question émise, réponse reçue, résultat renvoyé.

from __future__ import annotations

import datetime as dt
from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from questengine.core.bson_utils import MongoBaseModel, PyObjectId
from questengine.core.utils import utcnow
from questengine.models.progression import MissionState


class GeneratedQuestion(BaseModel):
    """Question telle que renvoyée par un producteur (source de questions).

    Description:
        `solution` peut être une chaîne, une liste de solutions acceptables ou
        `None` (question d'opinion : la réponse est enregistrée comme évaluation
        si `fid` et `family` sont fournis). Les champs d'affichage supplémentaires
        (ex. `duration`) sont conservés.
    """
    label: str = ""
    content: Any = None
    solution: Optional[Union[str, List[str]]] = None
    answers: List[str] = Field(default_factory=list)
    fid: Optional[str] = None
    family: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class QuestionPayload(BaseModel):
    """Question émise vers le client (solution chiffrée)."""
    id: int
    label: str = ""
    content: Any = None
    solution: str = ""
    answers: List[str] = Field(default_factory=list)
    html: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class PreviousQuestion(BaseModel):
    """Question déjà posée pendant la session courante.

    Attributes:
        id (int): Index de la question dans la banque.
        label (str): Libellé (pour l'historique).
        fid (str | None): Réf. de l'entité évaluée (questions d'opinion).
        family (str | None): Famille de l'entité évaluée.
        duration (float | None): Temps de réponse déclaré par le client (ms).
        is_correct (bool | None): Résultat, None tant que non répondue.
        solution (str): Jeton de solution chiffré émis avec la question.
    """
    id: int
    label: str = ""
    solution: str = ""
    fid: Optional[str] = None
    family: Optional[str] = None
    duration: Optional[float] = None
    is_correct: Optional[bool] = None
    asked_at: dt.datetime = Field(default_factory=lambda: utcnow())
    answered_at: Optional[dt.datetime] = None

    @property
    def answered(self) -> bool:
        return self.answered_at is not None


class AnswerPayload(BaseModel):
    """Réponse soumise par le client."""
    quiz_answer: str = Field(alias="quiz-answer")
    quiz_solution: str = Field(alias="quiz-solution")
    duration: float = Field(allow_inf_nan=False)
    question: int = Field(validation_alias=AliasChoices("question", "id"), ge=0)

    model_config = ConfigDict(populate_by_name=True)


class AnswerResult(BaseModel):
    """Résultat renvoyé après évaluation d'une réponse."""
    solution: Union[str, List[str]]
    is_correct: bool = Field(alias="isCorrect")
    is_complete: bool = Field(alias="isComplete")

    model_config = ConfigDict(populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class IdleResult(BaseModel):
    """Résultat neutre : rien à présenter (mission terminée ou quiz épuisé)."""
    state: MissionState
    points: float = 0


class Evaluation(MongoBaseModel):
    """Document Mongo « Evaluation » : réponse à une question sans solution."""
    user_id: PyObjectId
    mission_id: PyObjectId
    question_id: int
    fid: str
    family: str
    answer: str
    created_at: dt.datetime = Field(default_factory=lambda: utcnow())
