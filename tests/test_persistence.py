"""Tests for the Mongo persistence adapters."""

from types import SimpleNamespace

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from questengine.models.progression import MissionIdentity
from questengine.models.quiz import Evaluation
from questengine.services.persistence.evaluation_repository import EvaluationRepository
from questengine.services.persistence.progression_repository import ProgressionRepository


class TestProgressionRepository:
    """Test progression lookups and upserts."""

    @pytest.fixture
    def mock_db(self):
        """Mock database recording driver calls."""

        class MockCollection:
            def __init__(self):
                self.calls = []
                self.stored = None
                self.fail = False

            async def find_one(self, query):
                self.calls.append(("find_one", query))
                if self.fail:
                    raise PyMongoError("connection lost")
                return self.stored

            async def find_one_and_update(self, query, update, upsert=False, return_document=None):
                self.calls.append(("find_one_and_update", query, update, upsert, return_document))
                if self.fail:
                    raise PyMongoError("connection lost")
                self.stored = {
                    "_id": ObjectId(),
                    **update["$setOnInsert"],
                    **update["$set"],
                }
                return self.stored

        class MockDB:
            def __init__(self):
                self.progressions = MockCollection()

        return MockDB()

    @pytest.fixture
    def identity(self):
        return MissionIdentity(user_id=ObjectId(), mission_id=ObjectId())

    @pytest.mark.asyncio
    async def test_find_one_missing(self, mock_db, identity):
        """No document yields None."""
        repo = ProgressionRepository(mock_db)

        assert await repo.find_one(identity) is None
        assert mock_db.progressions.calls == [("find_one", identity.as_filter())]

    @pytest.mark.asyncio
    async def test_upsert_builds_update(self, mock_db, identity):
        """Identity and creation date only go to $setOnInsert."""
        repo = ProgressionRepository(mock_db)

        progression = await repo.upsert(
            identity,
            {"points": 12.5, "state": "game", "user_id": ObjectId(), "created_at": None},
        )

        _, query, update, upsert, return_document = mock_db.progressions.calls[0]
        assert query == identity.as_filter()
        assert upsert is True
        assert return_document == ReturnDocument.AFTER
        assert set(update["$set"]) == {"points", "state", "updated_at"}
        assert update["$setOnInsert"]["user_id"] == identity.user_id
        assert update["$setOnInsert"]["created_at"] is not None

        assert progression.identity == identity
        assert progression.points == 12.5
        assert progression.id is not None

    @pytest.mark.asyncio
    async def test_find_one_after_upsert(self, mock_db, identity):
        """Stored document is parsed back into a progression."""
        repo = ProgressionRepository(mock_db)
        await repo.upsert(identity, {"points": 3, "state": "failed"})

        progression = await repo.find_one(identity)

        assert progression.state == "failed"
        assert progression.is_terminal is True

    @pytest.mark.asyncio
    async def test_driver_errors_propagate(self, mock_db, identity):
        """Driver errors are raised to the caller."""
        repo = ProgressionRepository(mock_db)
        mock_db.progressions.fail = True

        with pytest.raises(PyMongoError):
            await repo.find_one(identity)
        with pytest.raises(PyMongoError):
            await repo.upsert(identity, {"points": 1})


class TestEvaluationRepository:
    """Test evaluation inserts."""

    @pytest.mark.asyncio
    async def test_record_returns_inserted_id(self):
        """Inserted document keeps its generated _id."""
        inserted = []
        new_id = ObjectId()

        class MockCollection:
            async def insert_one(self, doc):
                inserted.append(doc)
                return SimpleNamespace(inserted_id=new_id)

        repo = EvaluationRepository(SimpleNamespace(evaluations=MockCollection()))
        evaluation = Evaluation(
            user_id=ObjectId(),
            mission_id=ObjectId(),
            question_id=4,
            fid="lyon",
            family="city",
            answer="Oui",
        )

        saved = await repo.record(evaluation)

        assert saved.id == new_id
        assert inserted[0]["fid"] == "lyon"
        assert "_id" not in inserted[0]
