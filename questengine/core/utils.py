# questengine/core/utils.py
# Fonctions temporelles basiques et normalisation des solutions de questions.

import datetime as dt
from typing import Iterable


def utcnow():
    """Date/heure UTC (timezone-aware).

    Description:
        Recommandé pour les horodatages persistés (`created_at`, `updated_at`).

    Returns:
        datetime.datetime: Timestamp UTC (aware).
    """
    return dt.datetime.now(dt.timezone.utc)


def as_solution_list(solution: str | Iterable[str] | None) -> list[str]:
    """Normalise une solution (unique ou multiple) en liste ordonnée.

    Description:
        Une question peut déclarer une solution unique (`"Paris"`), plusieurs
        solutions acceptables (`["Paris", "Lyon"]`) ou aucune (question d'opinion).
        Les valeurs vides sont ignorées, l'ordre de déclaration est conservé.

    Args:
        solution (str | Iterable[str] | None): Solution brute renvoyée par le producteur.

    Returns:
        list[str]: Solutions non vides (liste vide si aucune).
    """
    if solution is None:
        return []
    if isinstance(solution, str):
        return [solution] if solution else []
    return [str(s) for s in solution if s is not None and str(s) != ""]
