# questengine/missions/capitals/mission.py
# Quiz d'exemple : questions statiques sur les villes de France et d'Europe.

from __future__ import annotations

import random
from typing import Any

from questengine.services.missions import QuizMission

QUESTIONS: list[dict[str, Any]] = [
    {
        "label": "Quelle est la capitale de la France ?",
        "solution": "Paris",
        "answers": ["Paris", "Lyon", "Marseille", "Bordeaux"],
    },
    {
        "label": "Quelles villes comptent plus de 500 000 habitants ?",
        "solution": ["Paris", "Lyon"],
        "answers": ["Paris", "Lyon", "Nantes", "Lille"],
    },
    {
        "label": "Quelle est la capitale de l'Espagne ?",
        "solution": "Madrid",
        "answers": ["Madrid", "Barcelone", "Séville", "Valence"],
    },
    {
        "label": "Quelle ville est traversée par la Garonne ?",
        "solution": "Bordeaux",
        "answers": ["Bordeaux", "Strasbourg", "Nice", "Rennes"],
    },
    {
        "label": "Aimeriez-vous visiter Lyon ?",
        "solution": None,
        "answers": ["Oui", "Non"],
        "fid": "lyon",
        "family": "city",
    },
]


def static_question(definition: dict[str, Any], rng: random.Random | None = None):
    """Producteur renvoyant une copie de `definition` avec des réponses mélangées."""
    shuffler = rng or random

    async def producer() -> dict[str, Any]:
        question = dict(definition)
        question["answers"] = shuffler.sample(definition["answers"], len(definition["answers"]))
        question.setdefault("duration", 10)
        return question

    return producer


class CapitalsQuiz(QuizMission):
    """Quiz « capitales » : 4 questions notées et une question d'opinion."""

    points_required = 30

    def __init__(self, repository, user_id, mission_id, **kwargs):
        super().__init__(repository, user_id, mission_id, **kwargs)
        for definition in QUESTIONS:
            self.add_question(static_question(definition, self.bank.rng))
