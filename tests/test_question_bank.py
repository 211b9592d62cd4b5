# tests/test_question_bank.py
# Banque de questions : tirage sans remise et historique de session.

import random

import pytest

from questengine.core.exceptions import QuestionNotFoundError, QuizExhaustedError
from questengine.models.quiz import GeneratedQuestion
from questengine.services.missions.question_bank import QuestionBank

from conftest import make_producer


@pytest.fixture
def bank():
    bank = QuestionBank(random.Random(3))
    for solution in ("A", "B", "C"):
        bank.add(make_producer(solution, [solution, "Z"]))
    return bank


def _ask(bank, question_id):
    return bank.record_asked(question_id, GeneratedQuestion(label=f"Q{question_id}", fid="f", family="fam"))


class TestQuestionBank:
    def test_identifiers_follow_registration_order(self):
        bank = QuestionBank()
        assert bank.add(make_producer("A", ["A"])) == 0
        assert bank.add(make_producer("B", ["B"])) == 1
        assert len(bank) == 2

    def test_pick_never_repeats(self, bank):
        picked = []
        for _ in range(3):
            question_id = bank.pick_unused()
            _ask(bank, question_id)
            picked.append(question_id)

        assert sorted(picked) == [0, 1, 2]
        with pytest.raises(QuizExhaustedError):
            bank.pick_unused()

    def test_pick_returns_last_unused(self, bank):
        _ask(bank, 0)
        _ask(bank, 2)
        assert bank.pick_unused() == 1

    def test_empty_bank_is_exhausted(self):
        with pytest.raises(QuizExhaustedError):
            QuestionBank().pick_unused()

    def test_record_keeps_question_metadata(self, bank):
        record = _ask(bank, 1)

        assert record.id == 1
        assert record.label == "Q1"
        assert record.fid == "f"
        assert record.family == "fam"
        assert record.answered is False
        assert bank.get(1) is record

    def test_unknown_question(self, bank):
        with pytest.raises(QuestionNotFoundError) as exc_info:
            bank.get(2)
        assert exc_info.value.question_id == 2

    def test_mark_answered_and_count(self, bank):
        _ask(bank, 0)
        _ask(bank, 1)

        record = bank.mark_answered(0, 1.5, True)
        bank.mark_answered(1, 3.0, False)

        assert record.answered is True
        assert record.duration == 1.5
        assert record.answered_at is not None
        assert bank.count_success() == 1

    def test_reset_keeps_producers(self, bank):
        _ask(bank, 0)
        bank.reset()

        assert bank.asked == {}
        assert len(bank) == 3
