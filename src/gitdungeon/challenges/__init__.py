"""
Challenges that gate each room.

Three variants share one surface (`setup`, `validate`):
- RepositoryChallenge: a git working tree must reach a declared state
- ScenarioChallenge: the same, wrapped in a story
- QuizChallenge: a multiple-choice question
"""

from .base import (
    AnswerOutOfRangeError,
    Challenge,
    ChallengeConfigError,
    ChallengeResult,
    ChallengeType,
)
from .criteria import Criterion, build_criteria, run_criteria
from .hints import default_hint
from .quiz import QuizChallenge
from .repository import RepositoryChallenge
from .scenario import ScenarioChallenge

__all__ = [
    "AnswerOutOfRangeError",
    "Challenge",
    "ChallengeConfigError",
    "ChallengeResult",
    "ChallengeType",
    "Criterion",
    "QuizChallenge",
    "RepositoryChallenge",
    "ScenarioChallenge",
    "build_criteria",
    "default_hint",
    "run_criteria",
]
