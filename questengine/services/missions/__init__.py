# questengine/services/missions/__init__.py

from .behavior import MissionBehavior
from .mission import Mission
from .quiz_mission import QuizMission

__all__ = [
    "Mission",
    "MissionBehavior",
    "QuizMission",
]
