# questengine/services/missions/behavior.py
# Contrat commun à toutes les variantes de mission.

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from questengine.models.progression import MissionProgression


@runtime_checkable
class MissionBehavior(Protocol):
    """Capacités exposées par chaque variante de mission.

    Description:
        - `is_completed` : prédicat de réussite propre à la variante.
        - `prepare` : traite une requête entrante (chargement de page ou données soumises).
        - `open` / `close` : transitions du cycle de vie, persistées.
    """

    def is_completed(self) -> bool: ...

    async def prepare(self, data: Mapping[str, Any] | None = None) -> Any: ...

    async def open(self) -> MissionProgression: ...

    async def close(self) -> MissionProgression: ...
