# questengine/services/missions/quiz_mission.py
# Mission « quiz » : questions générées, réponses évaluées dans l'espace chiffré, score dégressif.

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Mapping

from bson import ObjectId
from pydantic import ValidationError

from questengine.api.dto.response_format import (
    MALFORMED_ANSWER,
    MISSION_CLOSED,
    NO_QUESTION_LEFT,
    QUESTION_ALREADY_ANSWERED,
    QUESTION_NOT_FOUND,
    ErrorResponse,
)
from questengine.core.crypto import SolutionCipher, get_cipher
from questengine.core.exceptions import (
    MissionClosedError,
    QuestionNotFoundError,
    QuestionSourceError,
    QuizExhaustedError,
)
from questengine.core.logging_config import get_loggers
from questengine.core.utils import as_solution_list
from questengine.models.progression import FAILED, SUCCEED, MissionProgression
from questengine.models.quiz import (
    AnswerPayload,
    AnswerResult,
    Evaluation,
    GeneratedQuestion,
    PreviousQuestion,
    QuestionPayload,
)
from questengine.services.missions.mission import Mission
from questengine.services.missions.question_bank import QuestionBank, QuestionProducer
from questengine.services.missions.scoring import time_decay_points
from questengine.services.persistence.evaluation_repository import EvaluationRepository
from questengine.services.persistence.progression_repository import ProgressionRepository

logger_main, logger_errors, _ = get_loggers()

# Présence d'une de ces clés = tentative de réponse
ANSWER_KEYS = ("quiz-answer", "quiz-solution", "question")


class QuizMission(Mission):
    """Mission composée d'une série de questions.

    Description:
        Les sous-classes enregistrent leurs producteurs avec `add_question()` dans
        leur constructeur, après l'appel à `super().__init__()`. Chaque requête
        passe par `prepare()` :
        - une réponse soumise est évaluée (`eval_request`) ;
        - sinon, tant qu'il reste des questions, une nouvelle question est émise (`play`) ;
        - sinon, le résultat neutre de la mission de base est renvoyé.

        La solution d'une question n'est jamais envoyée en clair : elle est
        chiffrée avec la clé partagée, et la réponse de l'utilisateur est chiffrée
        à son tour pour être comparée dans l'espace chiffré.

    Attributes:
        questions_number (int): Taille de la banque.
        questions_left (int): Réponses restantes avant la clôture.
    """

    template_filename = "mission-quiz.html"

    def __init__(
        self,
        repository: ProgressionRepository,
        user_id: ObjectId,
        mission_id: ObjectId,
        *,
        evaluation_repository: EvaluationRepository | None = None,
        cipher: SolutionCipher | None = None,
        rng: random.Random | None = None,
        dirname: Path | None = None,
    ):
        super().__init__(repository, user_id, mission_id, dirname=dirname)
        self.bank = QuestionBank(rng)
        self.cipher = cipher or get_cipher()
        self.evaluation_repository = evaluation_repository
        self.questions_number = 0
        self.questions_left = 0

    # ------------------------------------------------------------------
    # Banque de questions
    # ------------------------------------------------------------------

    def add_question(self, producer: QuestionProducer) -> int:
        """Ajouter un producteur de question.

        Args:
            producer: Coroutine sans argument renvoyant un dict
                `{label, content, solution, answers, ...}`.

        Returns:
            int: Identifiant de la question.
        """
        question_id = self.bank.add(producer)
        self.questions_number = len(self.bank)
        self.questions_left = self.questions_number
        return question_id

    @property
    def previous_questions(self) -> dict[int, PreviousQuestion]:
        return self.bank.asked

    def get_random_question(self) -> int:
        """Identifiant tiré au hasard parmi les questions pas encore posées."""
        return self.bank.pick_unused()

    def count_question_success(self) -> int:
        return self.bank.count_success()

    def get_step(self) -> int:
        """Numéro (1-based) de la question courante."""
        return self.questions_number - self.questions_left + 1

    def is_completed(self) -> bool:
        return self.reaches_threshold(self.core.points)

    def reaches_threshold(self, points: float) -> bool:
        return points >= self.core.points_required

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def open(self) -> MissionProgression:
        """Rouvrir le quiz : progression remise à zéro et historique vidé."""
        progression = await super().open()
        self.questions_left = self.questions_number
        self.bank.reset()
        return progression

    # ------------------------------------------------------------------
    # Requêtes
    # ------------------------------------------------------------------

    async def prepare(self, data: Mapping[str, Any] | None = None) -> Any:
        """Traiter une requête entrante.

        Args:
            data: Données soumises (réponse) ou None (chargement de page).

        Returns:
            AnswerResult | ErrorResponse | QuestionPayload | IdleResult: Réponse à renvoyer.

        Raises:
            QuestionSourceError: Le producteur de la question tirée a échoué.
        """
        result = await self.eval_request(data)
        if result is not None:
            return result

        if self.questions_left > 0 and not self.core.is_terminal:
            try:
                return await self.play()
            except QuizExhaustedError as e:
                return ErrorResponse.from_detail(str(e), code=NO_QUESTION_LEFT)

        return await super().prepare(data)

    async def eval_request(self, data: Mapping[str, Any] | None) -> AnswerResult | ErrorResponse | None:
        """Évaluer une réponse soumise.

        Description:
            1. Le jeton renvoyé par le client doit être celui émis avec la question.
            2. La réponse est chiffrée avec la clé partagée ; elle est correcte si
               elle correspond à l'une des solutions chiffrées émises.
            3. Une réponse correcte rapporte `time_decay_points(duration)`.
            4. Les points (et, à la dernière réponse, l'état final) sont persistés
               en une seule écriture ; ensuite seulement la question est marquée
               répondue et `questions_left` décrémenté.
            Toute donnée invalide produit un `ErrorResponse` sans modifier l'état.

        Args:
            data: Données soumises.

        Returns:
            AnswerResult | ErrorResponse | None: None si la requête ne contient pas de réponse.
        """
        if not data or not any(key in data for key in ANSWER_KEYS):
            return None

        try:
            answer = AnswerPayload.model_validate(dict(data))
        except ValidationError as e:
            return ErrorResponse.from_detail(
                {
                    "message": "Malformed answer payload.",
                    "details": [
                        {"field": " -> ".join(str(loc) for loc in err["loc"]), "message": err["msg"]}
                        for err in e.errors()
                    ],
                },
                code=MALFORMED_ANSWER,
            )

        if self.core.is_terminal:
            return ErrorResponse.from_detail(f"The mission is {self.core.state}.", code=MISSION_CLOSED)

        try:
            record = self.bank.get(answer.question)
        except QuestionNotFoundError as e:
            return ErrorResponse.from_detail(str(e), code=QUESTION_NOT_FOUND)

        if record.answered:
            return ErrorResponse.from_detail(
                f"The question {record.id} has already been answered.", code=QUESTION_ALREADY_ANSWERED
            )
        if self.questions_left <= 0:
            return ErrorResponse.from_detail("No question left.", code=NO_QUESTION_LEFT)

        # Le jeton renvoyé doit être celui émis avec la question
        if answer.quiz_solution != record.solution:
            return ErrorResponse.from_detail(
                f"The solution token does not match the question {record.id}.", code=MALFORMED_ANSWER
            )

        candidates = self.cipher.split_token(record.solution)
        solutions = [self.cipher.decode(candidate) for candidate in candidates]

        if candidates:
            is_correct = self.cipher.encode(answer.quiz_answer) in candidates
            try:
                delta = time_decay_points(answer.duration) if is_correct else 0
            except OverflowError:
                return ErrorResponse.from_detail(
                    f"Unusable answer duration: {answer.duration}.", code=MALFORMED_ANSWER
                )
        else:
            # Question d'opinion : pas de bonne réponse, pas de points
            is_correct, delta = True, 0
            await self._record_evaluation(record, answer.quiz_answer)

        # Une seule écriture par réponse : points, et état final sur la dernière
        points = self.core.points + delta
        is_complete = self.questions_left == 1
        fields: dict[str, Any] = {"points": points}
        if is_complete:
            fields["state"] = SUCCEED if self.reaches_threshold(points) else FAILED
        await self.core.apply(**fields)

        self.bank.mark_answered(record.id, answer.duration, is_correct)
        self.questions_left -= 1
        if is_complete:
            self.log_closure(fields["state"])

        return AnswerResult(
            solution=solutions[0] if len(solutions) == 1 else solutions if solutions else "",
            is_correct=is_correct,
            is_complete=is_complete,
        )

    async def play(self) -> QuestionPayload:
        """Émettre une nouvelle question.

        Description:
            Tire une question jamais posée, appelle son producteur, chiffre la ou
            les solutions et rend le template. L'historique n'est modifié qu'une
            fois la question entièrement construite.

        Returns:
            QuestionPayload: Question à envoyer au client (solution chiffrée).

        Raises:
            MissionClosedError: La mission est terminée.
            QuizExhaustedError: Toutes les questions ont déjà été posées.
            QuestionSourceError: Le producteur a échoué ou renvoyé une question invalide.
        """
        if self.core.is_terminal:
            raise MissionClosedError(f"Mission is {self.core.state}, no question to ask")

        question_id = self.get_random_question()
        producer = self.bank.producers[question_id]

        try:
            question = GeneratedQuestion.model_validate(await producer())
        except Exception as e:
            logger_errors.error(f"Question producer #{question_id} failed: {e}")
            raise QuestionSourceError(question_id, e) from e

        fields = question.model_dump(exclude={"solution", "fid", "family"})
        payload = QuestionPayload.model_validate(
            {
                **fields,
                "id": question_id,
                "solution": self.cipher.join_token(as_solution_list(question.solution)),
                "html": None,
            }
        )
        payload.html = self.get_content({"question": payload.model_dump(exclude={"html"})})

        self.bank.record_asked(question_id, question, payload.solution)
        return payload

    def default_context(self) -> dict[str, Any]:
        context = super().default_context()
        context["quiz"] = {
            "step": self.get_step(),
            "questions_number": self.questions_number,
            "questions_left": self.questions_left,
            "successes": self.count_question_success(),
        }
        return context

    async def _record_evaluation(self, record: PreviousQuestion, answer: str) -> None:
        if self.evaluation_repository is None or not (record.fid and record.family):
            return
        await self.evaluation_repository.record(
            Evaluation(
                user_id=self.identity.user_id,
                mission_id=self.identity.mission_id,
                question_id=record.id,
                fid=record.fid,
                family=record.family,
                answer=answer,
            )
        )
        logger_main.info(f"Evaluation recorded for {record.family}/{record.fid}")
