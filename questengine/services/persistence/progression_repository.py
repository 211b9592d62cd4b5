# questengine/services/persistence/progression_repository.py
# Accès Mongo aux progressions (lecture par identité, upsert "last write wins").

from __future__ import annotations

from typing import Any, Mapping

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from questengine.core.logging_config import get_loggers
from questengine.core.utils import utcnow
from questengine.models.progression import MissionIdentity, MissionProgression

# Champs jamais écrasés par une mise à jour
_IDENTITY_FIELDS = ("_id", "id", "user_id", "mission_id")


class ProgressionRepository:
    """Adaptateur de persistance des progressions.

    Description:
        Un document par couple (utilisateur, mission) dans la collection
        `progressions`. Aucun verrou : la dernière écriture gagne. Les erreurs
        du driver sont tracées puis propagées à l'appelant.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """Initialiser le dépôt.

        Args:
            db: Instance de base de données MongoDB.
        """
        self.db = db

    async def find_one(self, identity: MissionIdentity) -> MissionProgression | None:
        """Charger la progression d'un couple (utilisateur, mission).

        Args:
            identity: Identité de la progression.

        Returns:
            MissionProgression | None: Progression trouvée ou None.
        """
        try:
            doc = await self.db.progressions.find_one(identity.as_filter())
        except PyMongoError as e:
            get_loggers()[1].error(f"Progression lookup failed for {identity.as_filter()}: {e}")
            raise
        return MissionProgression.model_validate(doc) if doc else None

    async def upsert(self, identity: MissionIdentity, fields: Mapping[str, Any]) -> MissionProgression:
        """Créer ou mettre à jour la progression.

        Description:
            `created_at` n'est écrit qu'à la création (`$setOnInsert`) ; les champs
            d'identité ne sont jamais modifiés. `updated_at` est rafraîchi à chaque appel.

        Args:
            identity: Identité de la progression.
            fields: Champs à écrire (points, state, ...).

        Returns:
            MissionProgression: Document après écriture.
        """
        now = utcnow()
        to_set = {k: v for k, v in fields.items() if k not in _IDENTITY_FIELDS and k != "created_at"}
        to_set["updated_at"] = now

        try:
            doc = await self.db.progressions.find_one_and_update(
                identity.as_filter(),
                {
                    "$set": to_set,
                    "$setOnInsert": {
                        **identity.as_filter(),
                        "created_at": fields.get("created_at") or now,
                    },
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            get_loggers()[1].error(f"Progression upsert failed for {identity.as_filter()}: {e}")
            raise
        return MissionProgression.model_validate(doc)
