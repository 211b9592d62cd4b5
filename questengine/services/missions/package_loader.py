# questengine/services/missions/package_loader.py
# Lecture du manifest statique (package.json) livré dans le dossier d'une mission.

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from questengine.core.exceptions import MissionConfigError
from questengine.models.manifest import MissionManifest


class PackageLoader:
    """Chargeur du manifest d'une mission.

    Description:
        Le manifest est obligatoire : un fichier absent, un JSON invalide ou un
        contenu non conforme à `MissionManifest` lèvent `MissionConfigError`.
    """

    def __init__(self, dirname: Path, package_filename: str = "package.json"):
        self.dirname = Path(dirname)
        self.package_filename = package_filename

    def get_package_path(self) -> str:
        """Chemin absolu attendu du manifest."""
        return str((self.dirname / self.package_filename).resolve())

    def package_exists(self) -> bool:
        return Path(self.get_package_path()).is_file()

    def load_package(self) -> MissionManifest:
        """Lire et valider le manifest.

        Returns:
            MissionManifest: Configuration statique de la mission.

        Raises:
            MissionConfigError: Manifest absent ou invalide.
        """
        path = self.get_package_path()
        if not self.package_exists():
            raise MissionConfigError(f"Mission package not found: {path}", path=path)

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise MissionConfigError(f"Unable to read mission package {path}: {e}", path=path) from e

        if not isinstance(raw, dict):
            raise MissionConfigError(f"Mission package must be a JSON object: {path}", path=path)

        try:
            return MissionManifest.model_validate(raw)
        except ValidationError as e:
            raise MissionConfigError(f"Invalid mission package {path}: {e}", path=path) from e
