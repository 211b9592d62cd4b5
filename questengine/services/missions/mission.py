# questengine/services/missions/mission.py
# Mission « abstraite » : cycle de vie game → succeed/failed, points et rendu.

from __future__ import annotations

import datetime as dt
import inspect
from pathlib import Path
from typing import Any, Mapping

from bson import ObjectId

from questengine.core.exceptions import MissionClosedError
from questengine.core.logging_config import extract_user_data, get_loggers
from questengine.core.settings import get_settings
from questengine.models.manifest import MissionManifest
from questengine.models.progression import (
    FAILED,
    GAME,
    SUCCEED,
    MissionIdentity,
    MissionProgression,
    MissionState,
)
from questengine.models.quiz import IdleResult
from questengine.services.missions.mission_core import MissionCore
from questengine.services.persistence.progression_repository import ProgressionRepository

logger_main = get_loggers()[0]


class Mission:
    """Mission de base.

    Description:
        Une variante concrète doit définir `is_completed()`. Les attributs de
        classe `points_required`, `duration` et `template_filename` configurent le
        type de mission ; le dossier de la mission (manifest `package.json`,
        templates) est par défaut celui du module qui définit la sous-classe.

        Une mission se construit avec `await MissionClass.create(...)` : le
        constructeur seul ne synchronise rien.
    """

    points_required: int | None = None
    duration: int = -1
    template_filename: str = "mission.html"
    mission_dirname: Path | None = None

    def __init__(
        self,
        repository: ProgressionRepository,
        user_id: ObjectId,
        mission_id: ObjectId,
        *,
        dirname: Path | None = None,
    ):
        points_required = self.points_required
        if points_required is None:
            points_required = get_settings().default_points_required

        self.core = MissionCore(
            repository,
            MissionIdentity(user_id=user_id, mission_id=mission_id),
            points_required=points_required,
            duration=self.duration,
            dirname=Path(dirname or self.mission_dirname or self._module_dirname()),
            template_filename=self.template_filename,
        )

    @classmethod
    async def create(cls, repository: ProgressionRepository, user_id: ObjectId, mission_id: ObjectId, **kwargs):
        """Construire une mission prête à l'emploi.

        Description:
            Instancie la mission puis, en parallèle, synchronise la progression
            persistée et charge la configuration statique.

        Args:
            repository: Dépôt des progressions.
            user_id: Identifiant de l'utilisateur.
            mission_id: Identifiant de la mission.
            **kwargs: Options propres à la variante.

        Returns:
            Mission: Instance synchronisée.

        Raises:
            MissionConfigError: Manifest ou template absent/invalide.
            pymongo.errors.PyMongoError: Échec de la persistance.
        """
        mission = cls(repository, user_id, mission_id, **kwargs)
        await mission.core.initialize()
        return mission

    def _module_dirname(self) -> Path:
        return Path(inspect.getfile(type(self))).resolve().parent

    # ------------------------------------------------------------------
    # État
    # ------------------------------------------------------------------

    @property
    def identity(self) -> MissionIdentity:
        return self.core.identity

    @property
    def points(self) -> float:
        return self.core.points

    @property
    def state(self) -> MissionState:
        return self.core.state

    @property
    def created_at(self) -> dt.datetime:
        return self.core.created_at

    @property
    def config(self) -> MissionManifest | None:
        return self.core.manifest

    @property
    def is_ready(self) -> bool:
        return self.core.is_ready

    def is_completed(self) -> bool:
        """Prédicat de réussite, à définir par chaque variante."""
        raise NotImplementedError("You must override Mission.is_completed in a subclass")

    def get_user_points(self) -> float:
        """Points visibles de l'utilisateur : 0 tant que la mission n'est pas réussie."""
        return self.core.points if self.is_completed() else 0

    async def record_points(self, delta: float) -> bool:
        """Ajouter `delta` points et persister.

        Returns:
            bool: True si cet ajout vient de rendre la mission réussie.

        Raises:
            MissionClosedError: La mission est terminée.
        """
        if self.core.is_terminal:
            raise MissionClosedError(f"Mission is {self.core.state}, points are frozen")

        was_completed = self.is_completed()
        await self.core.apply(points=self.core.points + delta)
        return not was_completed and self.is_completed()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def close(self) -> MissionProgression:
        """Terminer la mission (succeed si réussie, failed sinon) et persister."""
        state = SUCCEED if self.is_completed() else FAILED
        progression = await self.core.apply(state=state)
        self.log_closure(state)
        return progression

    def log_closure(self, state: MissionState) -> None:
        """Tracer la clôture (log générique et journal de données)."""
        user_data = extract_user_data(self.identity.user_id, self.identity.mission_id)
        logger_main.info(f"Mission closed as {state} with {self.core.points} points ({user_data})")
        get_loggers()[2].log_data(
            "mission.close",
            {"state": state, "points": self.core.points, "points_required": self.core.points_required},
            user_data,
        )

    async def open(self) -> MissionProgression:
        """(Ré)ouvrir la mission : état `game`, points remis à zéro."""
        progression = await self.core.apply(state=GAME, points=0)
        logger_main.info(f"Mission opened for {self.identity.as_filter()}")
        return progression

    async def update(self) -> MissionProgression:
        """Persister l'état courant (points, état)."""
        return await self.core.apply()

    async def prepare(self, data: Mapping[str, Any] | None = None) -> Any:
        """Traiter une requête : la mission de base n'a rien à présenter."""
        return IdleResult(state=self.core.state, points=self.get_user_points())

    # ------------------------------------------------------------------
    # Configuration statique et rendu
    # ------------------------------------------------------------------

    def package_exists(self) -> bool:
        return self.core.package_loader.package_exists()

    def get_package_path(self) -> str:
        return self.core.package_loader.get_package_path()

    async def load_package(self) -> MissionManifest:
        return await self.core.load_package()

    def template_exists(self) -> bool:
        return self.core.renderer.template_exists(self.core.template_filename)

    def get_template_path(self) -> str | None:
        return self.core.renderer.get_template_path(self.core.template_filename)

    def default_context(self) -> dict[str, Any]:
        """Contexte commun à tous les rendus de la mission."""
        return {
            "mission": {
                "user_id": str(self.identity.user_id),
                "mission_id": str(self.identity.mission_id),
                "state": self.core.state,
                "points": self.get_user_points(),
                "points_required": self.core.points_required,
                "duration": self.core.duration,
                "created_at": self.core.created_at,
            },
            "config": self.config.context() if self.config else {},
        }

    def render(self, name: str, context: Mapping[str, Any] | None = None) -> str:
        """Rendre le template `name` ; le contexte appelant surcharge le contexte par défaut."""
        return self.core.render(name, {**self.default_context(), **(context or {})})

    def get_content(self, context: Mapping[str, Any] | None = None) -> str:
        """Rendre le template principal de la mission."""
        return self.render(self.core.template_filename, context)
