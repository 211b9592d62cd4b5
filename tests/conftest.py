# tests/conftest.py
# Fixtures partagées : environnement isolé, dépôts en mémoire, quiz de test.

import json
import os
import tempfile

# Logs dans un dossier temporaire, avant tout import du package
os.environ.setdefault("LOGS_DIR", tempfile.mkdtemp(prefix="questengine-logs-"))
os.environ.setdefault("ENVIRONMENT", "test")

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from questengine.core.crypto import SolutionCipher
from questengine.core.utils import utcnow
from questengine.models.progression import MissionIdentity, MissionProgression
from questengine.services.missions import QuizMission


class FakeProgressionRepository:
    """Dépôt des progressions en mémoire (mêmes règles que le dépôt Mongo)."""

    def __init__(self):
        self.docs = {}
        self.writes = []
        self.fail_writes = False

    def _key(self, identity):
        return (identity.user_id, identity.mission_id)

    async def find_one(self, identity: MissionIdentity):
        doc = self.docs.get(self._key(identity))
        return MissionProgression.model_validate(doc) if doc else None

    async def upsert(self, identity: MissionIdentity, fields):
        if self.fail_writes:
            raise PyMongoError("write refused")
        self.writes.append(dict(fields))

        key = self._key(identity)
        doc = self.docs.get(key)
        if doc is None:
            doc = {**identity.as_filter(), "created_at": fields.get("created_at") or utcnow()}
        doc.update({k: v for k, v in fields.items() if k not in ("user_id", "mission_id", "created_at")})
        doc["updated_at"] = utcnow()
        self.docs[key] = doc
        return MissionProgression.model_validate(doc)

    def seed(self, user_id, mission_id, **fields):
        self.docs[(user_id, mission_id)] = {
            "user_id": user_id,
            "mission_id": mission_id,
            "created_at": utcnow(),
            **fields,
        }


class FakeEvaluationRepository:
    def __init__(self):
        self.evaluations = []

    async def record(self, evaluation):
        self.evaluations.append(evaluation)
        return evaluation


def make_producer(solution, answers, **extra):
    async def producer():
        return {"label": f"Question {answers}", "content": "<p>?</p>", "solution": solution, "answers": list(answers), **extra}
    return producer


class ThreeQuestionsQuiz(QuizMission):
    points_required = 30

    def __init__(self, repository, user_id, mission_id, **kwargs):
        super().__init__(repository, user_id, mission_id, **kwargs)
        self.add_question(make_producer("A", ["A", "B"]))
        self.add_question(make_producer(["Paris", "Lyon"], ["Paris", "Lyon", "Nice"]))
        self.add_question(make_producer("C", ["C", "D"]))


@pytest.fixture
def repository():
    return FakeProgressionRepository()


@pytest.fixture
def evaluations():
    return FakeEvaluationRepository()


@pytest.fixture
def cipher():
    return SolutionCipher("test-secret-key")


@pytest.fixture
def mission_dir(tmp_path):
    """Dossier de mission minimal : manifest seul, templates par défaut."""
    (tmp_path / "package.json").write_text(json.dumps({"name": "test-quiz", "title": "Test"}), encoding="utf-8")
    return tmp_path


@pytest.fixture
def ids():
    return ObjectId(), ObjectId()


def answer_for(payload, answer, duration=0):
    """Données soumises par le client pour une question émise."""
    return {
        "quiz-answer": answer,
        "quiz-solution": payload.solution,
        "duration": duration,
        "question": payload.id,
    }
