# questengine/services/missions/template_renderer.py
# Rendu des fragments HTML des missions (Jinja2).

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from questengine.core.exceptions import MissionConfigError

# Templates par défaut livrés avec le moteur
DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"


class TemplateRenderer:
    """Rendu Jinja2 avec recherche en cascade.

    Description:
        Les templates sont cherchés d'abord dans le dossier de la mission, puis
        dans les templates par défaut du moteur. Le rendu ne dépend que du nom et
        du contexte fournis.
    """

    def __init__(self, dirnames: Iterable[Path]):
        self.dirnames = [Path(d) for d in dirnames]
        if DEFAULT_TEMPLATES_DIR not in self.dirnames:
            self.dirnames.append(DEFAULT_TEMPLATES_DIR)

        self.env = Environment(
            loader=FileSystemLoader([str(d) for d in self.dirnames]),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def get_template_path(self, name: str) -> str | None:
        """Chemin du premier template trouvé pour `name` (None si absent)."""
        for dirname in self.dirnames:
            path = dirname / name
            if path.is_file():
                return str(path.resolve())
        return None

    def template_exists(self, name: str) -> bool:
        return self.get_template_path(name) is not None

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Rendre le template `name` avec `context`.

        Raises:
            MissionConfigError: Template introuvable ou illisible.
        """
        try:
            template = self.env.get_template(name)
        except TemplateError as e:
            raise MissionConfigError(f"Unable to load template {name!r}: {e}") from e
        return template.render(**context)
