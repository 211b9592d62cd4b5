# questengine/services/missions/scoring.py
# Barème des réponses de quiz : décroissance cubique avec le temps de réponse.

from __future__ import annotations

from questengine.core.settings import get_settings


def time_decay_points(
    duration: float,
    *,
    max_points: float | None = None,
    divisor: float | None = None,
) -> float:
    """Points attribués à une réponse correcte donnée après `duration`.

    Description:
        `-1 * duration**3 * (max_points / divisor) + max_points`, soit avec les
        valeurs par défaut `-duration³ × 10/125 + 10`. Une réponse immédiate vaut
        `max_points`. `duration` est la valeur déclarée par le client, sans borne :
        le résultat devient négatif au-delà de `(divisor) ** (1/3)`.

    Args:
        duration (float): Temps de réponse déclaré (ms).
        max_points (float | None): Valeur maximale d'une question (défaut : settings).
        divisor (float | None): Diviseur de la décroissance (défaut : settings).

    Returns:
        float: Points à ajouter au score.
    """
    settings = get_settings()
    if max_points is None:
        max_points = settings.max_points_per_question
    if divisor is None:
        divisor = settings.points_decay_divisor

    return -1 * duration ** 3 * (max_points / divisor) + max_points
