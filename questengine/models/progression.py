# questengine/models/progression.py
# Progression persistée d'un utilisateur sur une mission (points, état, horodatages).

from __future__ import annotations

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from questengine.core.bson_utils import MongoBaseModel, PyObjectId
from questengine.core.utils import utcnow

MissionState = Literal["game", "succeed", "failed"]

GAME: MissionState = "game"
SUCCEED: MissionState = "succeed"
FAILED: MissionState = "failed"
TERMINAL_STATES: frozenset[str] = frozenset({SUCCEED, FAILED})


class MissionIdentity(BaseModel):
    """Clé d'une progression : un couple (utilisateur, mission).

    Attributes:
        user_id (PyObjectId): Réf. utilisateur.
        mission_id (PyObjectId): Réf. mission (ou chapitre).
    """
    user_id: PyObjectId
    mission_id: PyObjectId

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    def as_filter(self) -> dict:
        """Filtre Mongo correspondant à cette identité."""
        return {"user_id": self.user_id, "mission_id": self.mission_id}


class MissionProgression(MongoBaseModel):
    """Document Mongo « Progression ».

    Description:
        Un document par couple (utilisateur, mission). L'état `game` signifie
        « en cours » ; `succeed` et `failed` sont terminaux jusqu'à un `open()`
        explicite.

    Attributes:
        user_id (PyObjectId): Réf. utilisateur.
        mission_id (PyObjectId): Réf. mission.
        points (float): Score cumulé.
        state (Literal['game','succeed','failed']): État courant.
        points_required (int): Seuil de réussite.
        duration (int): Budget de temps en ms (-1 : illimité, indicatif).
        created_at (datetime): Création (jamais modifiée).
        updated_at (datetime | None): Dernière écriture.
    """
    user_id: PyObjectId
    mission_id: PyObjectId
    points: float = 0
    state: MissionState = GAME
    points_required: int = 100
    duration: int = -1

    created_at: dt.datetime = Field(default_factory=lambda: utcnow())
    updated_at: Optional[dt.datetime] = None

    @property
    def identity(self) -> MissionIdentity:
        return MissionIdentity(user_id=self.user_id, mission_id=self.mission_id)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES
