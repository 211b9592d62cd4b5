# questengine/services/missions/question_bank.py
# Banque de questions d'un quiz : producteurs enregistrés et questions déjà posées.

from __future__ import annotations

import random
from typing import Any, Awaitable, Callable

from questengine.core.exceptions import QuestionNotFoundError, QuizExhaustedError
from questengine.core.utils import utcnow
from questengine.models.quiz import GeneratedQuestion, PreviousQuestion

QuestionProducer = Callable[[], Awaitable[dict[str, Any]]]


class QuestionBank:
    """Producteurs de questions et historique de la session.

    Description:
        L'ordre d'enregistrement des producteurs définit leurs identifiants
        (0..N-1). L'historique associe à chaque identifiant déjà posé un
        `PreviousQuestion` ; un identifiant n'y figure qu'une fois.

    Attributes:
        producers (list): Producteurs asynchrones, indexés par identifiant.
        asked (dict[int, PreviousQuestion]): Questions posées pendant la session.
    """

    def __init__(self, rng: random.Random | None = None):
        self.producers: list[QuestionProducer] = []
        self.asked: dict[int, PreviousQuestion] = {}
        self.rng = rng or random.Random()

    def __len__(self) -> int:
        return len(self.producers)

    def add(self, producer: QuestionProducer) -> int:
        """Enregistrer un producteur et retourner son identifiant."""
        self.producers.append(producer)
        return len(self.producers) - 1

    def pick_unused(self) -> int:
        """Tirer uniformément un identifiant jamais posé pendant la session.

        Raises:
            QuizExhaustedError: Tous les identifiants ont déjà été posés.
        """
        if len(self.asked) >= len(self.producers):
            raise QuizExhaustedError("Every question of the bank has already been asked")

        while True:
            question_id = self.rng.randrange(len(self.producers))
            if question_id not in self.asked:
                return question_id

    def get(self, question_id: int) -> PreviousQuestion:
        """Retrouver une question posée.

        Raises:
            QuestionNotFoundError: Identifiant jamais posé pendant la session.
        """
        try:
            return self.asked[question_id]
        except KeyError:
            raise QuestionNotFoundError(question_id) from None

    def record_asked(self, question_id: int, question: GeneratedQuestion, solution: str = "") -> PreviousQuestion:
        """Mémoriser une question émise avec son jeton de solution chiffré."""
        record = PreviousQuestion(
            id=question_id,
            label=question.label,
            solution=solution,
            fid=question.fid,
            family=question.family,
        )
        self.asked[question_id] = record
        return record

    def mark_answered(self, question_id: int, duration: float, is_correct: bool) -> PreviousQuestion:
        record = self.get(question_id).model_copy(
            update={"duration": duration, "is_correct": is_correct, "answered_at": utcnow()}
        )
        self.asked[question_id] = record
        return record

    def count_success(self) -> int:
        return sum(1 for record in self.asked.values() if record.is_correct)

    def reset(self) -> None:
        """Vider l'historique (les producteurs restent enregistrés)."""
        self.asked = {}
