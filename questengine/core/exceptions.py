# questengine/core/exceptions.py
# Exceptions métier du moteur de missions.

from __future__ import annotations


class QuestEngineError(Exception):
    """Erreur de base du moteur de missions."""


class MissionConfigError(QuestEngineError):
    """Configuration statique absente ou invalide (manifest, template).

    Description:
        Erreur fatale levée pendant la construction d'une mission : aucune
        reprise n'est tentée, la mission n'est pas utilisable.
    """

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class QuestionNotFoundError(QuestEngineError, LookupError):
    """Aucune question n'a été émise avec cet identifiant dans la session."""

    def __init__(self, question_id: int):
        super().__init__(f"Unable to find the question {question_id}.")
        self.question_id = question_id


class QuizExhaustedError(QuestEngineError):
    """Toutes les questions de la banque ont déjà été posées."""


class QuestionSourceError(QuestEngineError):
    """Un producteur de questions a échoué."""

    def __init__(self, question_id: int, cause: BaseException):
        super().__init__(f"Question producer #{question_id} failed: {cause}")
        self.question_id = question_id
        self.__cause__ = cause


class MissionClosedError(QuestEngineError):
    """Tentative de modification d'une mission terminée (succeed/failed)."""


class SolutionTokenError(QuestEngineError, ValueError):
    """Jeton de solution illisible (altéré ou chiffré avec une autre clé)."""
