# questengine/services/persistence/evaluation_repository.py
# Enregistre les réponses aux questions d'opinion (sans solution).

from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorDatabase

from questengine.core.bson_utils import dump_mongo
from questengine.models.quiz import Evaluation


class EvaluationRepository:
    """Dépôt des évaluations.

    Description:
        Une question sans solution sert à recueillir l'avis de l'utilisateur sur
        une entité (`fid`, `family`). Chaque réponse devient un document
        `evaluations` ; aucun point n'est attribué.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db

    async def record(self, evaluation: Evaluation) -> Evaluation:
        """Insérer une évaluation et retourner le document avec son `_id`."""
        result = await self.db.evaluations.insert_one(dump_mongo(evaluation))
        return evaluation.model_copy(update={"id": result.inserted_id})
