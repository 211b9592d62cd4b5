# questengine/models/manifest.py
# Manifest statique d'une mission (fichier package.json livré avec la mission).

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class MissionManifest(BaseModel):
    """Configuration statique d'un type de mission.

    Description:
        Lue une seule fois à la construction. Les champs inconnus sont conservés
        (`extra="allow"`) et restent disponibles dans le contexte des templates.

    Attributes:
        name (str): Identifiant du paquet de mission.
        version (str): Version du paquet.
        title (str | None): Titre affiché.
        description (str | None): Description courte.
        points_required (int | None): Seuil de réussite (surcharge le type).
        duration (int | None): Budget de temps en ms (-1 : illimité).
        template (str | None): Nom du template (surcharge le type).
    """
    name: str
    version: str = "0.0.0"
    title: Optional[str] = None
    description: Optional[str] = None
    points_required: Optional[int] = Field(default=None, alias="pointsRequired", ge=0)
    duration: Optional[int] = Field(default=None, ge=-1)
    template: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def context(self) -> dict[str, Any]:
        """Représentation utilisée dans le contexte de rendu."""
        return self.model_dump(exclude_none=True)
