# questengine/services/missions/mission_core.py
# État partagé d'une mission : synchronisation, écritures sérialisées, manifest et templates.

from __future__ import annotations

import asyncio
import datetime as dt
from pathlib import Path
from typing import Any

from questengine.core.exceptions import MissionConfigError
from questengine.core.logging_config import get_loggers
from questengine.core.settings import get_settings
from questengine.core.utils import utcnow
from questengine.models.manifest import MissionManifest
from questengine.models.progression import (
    GAME,
    TERMINAL_STATES,
    MissionIdentity,
    MissionProgression,
    MissionState,
)
from questengine.services.missions.package_loader import PackageLoader
from questengine.services.missions.template_renderer import TemplateRenderer
from questengine.services.persistence.progression_repository import ProgressionRepository

logger = get_loggers()[0]

# Champs recopiés depuis la progression persistée lors de la synchronisation
_SYNCED_FIELDS = ("points", "state", "created_at")


class MissionCore:
    """Cycle de vie partagé par toutes les variantes de mission.

    Description:
        Porte l'état en mémoire (points, état, dates) d'un couple
        (utilisateur, mission) et centralise :
        - la synchronisation avec la progression persistée ;
        - les écritures, sérialisées par un verrou : la base est écrite d'abord,
          la mémoire n'est mise à jour qu'après succès ;
        - le chargement du manifest et la vérification du template.

    Attributes:
        identity (MissionIdentity): Couple (utilisateur, mission).
        points (float): Score cumulé.
        state (MissionState): État courant.
        created_at (datetime): Date de première construction.
        points_required (int): Seuil de réussite.
        duration (int): Budget de temps en ms (-1 : illimité).
        manifest (MissionManifest | None): Configuration statique chargée.
        is_ready (bool): True une fois la construction terminée.
    """

    def __init__(
        self,
        repository: ProgressionRepository,
        identity: MissionIdentity,
        *,
        points_required: int,
        duration: int,
        dirname: Path,
        template_filename: str,
    ):
        self.repository = repository
        self.identity = identity

        # Valeurs par défaut, écrasées par la synchronisation si une progression existe
        self.points: float = 0
        self.state: MissionState = GAME
        self.created_at: dt.datetime = utcnow()
        self.points_required = points_required
        self.duration = duration

        self.manifest: MissionManifest | None = None
        self.template_filename = template_filename
        self.package_loader = PackageLoader(dirname, get_settings().package_filename)
        self.renderer = TemplateRenderer([dirname])
        self.is_ready = False

        self._lock = asyncio.Lock()

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def snapshot(self) -> dict[str, Any]:
        """Champs persistés de la progression courante."""
        return {
            "points": self.points,
            "state": self.state,
            "points_required": self.points_required,
            "duration": self.duration,
        }

    async def initialize(self) -> None:
        """Lire la progression et charger le manifest en parallèle.

        Description:
            Les valeurs par défaut d'une nouvelle progression ne sont écrites
            qu'une fois le manifest appliqué (seuil et durée éventuellement surchargés).

        Raises:
            MissionConfigError: Manifest ou template absent/invalide (fatal).
        """
        progression, _ = await asyncio.gather(
            self.repository.find_one(self.identity), self.load_package()
        )
        await self._adopt(progression)
        self.is_ready = True

    async def sync(self) -> MissionProgression:
        """Aligner l'état en mémoire sur la progression persistée.

        Description:
            Si une progression existe, ses champs (hors identité) remplacent les
            valeurs par défaut ; sinon les valeurs par défaut sont persistées comme
            progression initiale.

        Returns:
            MissionProgression: Progression après synchronisation.
        """
        return await self._adopt(await self.repository.find_one(self.identity))

    async def _adopt(self, progression: MissionProgression | None) -> MissionProgression:
        if progression is None:
            progression = await self.repository.upsert(
                self.identity, {**self.snapshot(), "created_at": self.created_at}
            )
            logger.info(f"Progression created for {self.identity.as_filter()}")
        else:
            for field in _SYNCED_FIELDS:
                setattr(self, field, getattr(progression, field))
        return progression

    async def load_package(self) -> MissionManifest:
        """Charger le manifest (dans un thread) et vérifier le template.

        Description:
            Le manifest peut surcharger le seuil de réussite, la durée et le nom
            du template propres au type de mission.
        """
        manifest = await asyncio.to_thread(self.package_loader.load_package)

        if manifest.template:
            self.template_filename = manifest.template
        if not self.renderer.template_exists(self.template_filename):
            raise MissionConfigError(f"Mission template not found: {self.template_filename}")

        if manifest.points_required is not None:
            self.points_required = manifest.points_required
        if manifest.duration is not None:
            self.duration = manifest.duration

        self.manifest = manifest
        return manifest

    async def apply(self, **fields: Any) -> MissionProgression:
        """Persister puis appliquer une modification de l'état.

        Description:
            Point de passage unique de toutes les écritures. En cas d'échec de la
            persistance, l'exception est propagée et l'état en mémoire n'a pas bougé.

        Args:
            **fields: Champs à modifier (points, state).

        Returns:
            MissionProgression: Progression écrite.
        """
        async with self._lock:
            progression = await self.repository.upsert(self.identity, {**self.snapshot(), **fields})
            for field, value in fields.items():
                setattr(self, field, value)
            return progression

    def render(self, name: str, context: dict[str, Any]) -> str:
        return self.renderer.render(name, context)
