# tests/test_capitals_mission.py
# Partie complète sur le quiz d'exemple livré avec le moteur.

import random

import pytest

from questengine.missions.capitals.mission import QUESTIONS, CapitalsQuiz
from questengine.models.quiz import AnswerResult, QuestionPayload

from conftest import answer_for

_BY_LABEL = {definition["label"]: definition for definition in QUESTIONS}


def _expected_answer(payload):
    solution = _BY_LABEL[payload.label]["solution"]
    if solution is None:
        return "Oui"
    return solution[0] if isinstance(solution, list) else solution


class TestCapitalsQuiz:
    @pytest.mark.asyncio
    async def test_manifest_is_loaded_from_mission_folder(self, repository, evaluations, cipher, ids):
        quiz = await CapitalsQuiz.create(repository, *ids, evaluation_repository=evaluations, cipher=cipher)

        assert quiz.config.name == "capitals-quiz"
        assert quiz.core.points_required == 30
        assert quiz.questions_number == len(QUESTIONS)
        assert quiz.get_template_path().endswith("mission-quiz.html")

    @pytest.mark.asyncio
    async def test_full_game_succeeds(self, repository, evaluations, cipher, ids):
        quiz = await CapitalsQuiz.create(
            repository, *ids, evaluation_repository=evaluations, cipher=cipher, rng=random.Random(11)
        )

        labels = set()
        result = None
        for _ in QUESTIONS:
            payload = await quiz.prepare(None)
            assert isinstance(payload, QuestionPayload)
            assert payload.duration == 10
            labels.add(payload.label)

            result = await quiz.prepare(answer_for(payload, _expected_answer(payload)))
            assert isinstance(result, AnswerResult)
            assert result.is_correct is True

        assert labels == set(_BY_LABEL)
        assert result.is_complete is True
        assert quiz.state == "succeed"
        assert quiz.get_user_points() == 40
        assert quiz.count_question_success() == len(QUESTIONS)
        assert repository.docs[ids]["state"] == "succeed"

        assert len(evaluations.evaluations) == 1
        evaluation = evaluations.evaluations[0]
        assert (evaluation.fid, evaluation.family, evaluation.answer) == ("lyon", "city", "Oui")

    @pytest.mark.asyncio
    async def test_answers_are_shuffled_not_changed(self, repository, cipher, ids):
        quiz = await CapitalsQuiz.create(repository, *ids, cipher=cipher, rng=random.Random(5))

        payload = await quiz.prepare(None)

        assert sorted(payload.answers) == sorted(_BY_LABEL[payload.label]["answers"])
