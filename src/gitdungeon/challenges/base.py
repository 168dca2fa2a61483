"""
Challenge abstraction.

A challenge gates a room. It can prepare the working directory
(`setup`) and judge it (`validate`). Results are plain values;
environment trouble during validation becomes a failed result rather
than an exception.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Callable

from pydantic import BaseModel, ConfigDict

from ..git.inspector import DirectoryMissingError, RepoInspector


# -----------------------------------------------------------------------------
# Errors
# -----------------------------------------------------------------------------

class ChallengeConfigError(ValueError):
    """A challenge was built or used with invalid arguments."""
    pass


class AnswerOutOfRangeError(ChallengeConfigError, IndexError):
    """Quiz answer index outside the option list."""

    def __init__(self, index: int, option_count: int):
        self.index = index
        self.option_count = option_count
        super().__init__(
            f"Answer index {index} is out of range (0-{option_count - 1})"
        )


# -----------------------------------------------------------------------------
# Values
# -----------------------------------------------------------------------------

class ChallengeType(str, Enum):
    REPOSITORY = "repository"
    QUIZ = "quiz"
    SCENARIO = "scenario"


class ChallengeResult(BaseModel):
    """Outcome of one validate() call."""
    model_config = ConfigDict(frozen=True)

    is_successful: bool
    message: str
    hint: str | None = None

    @classmethod
    def passed(cls, message: str) -> ChallengeResult:
        return cls(is_successful=True, message=message, hint=None)

    @classmethod
    def failed(cls, message: str, hint: str | None = None) -> ChallengeResult:
        return cls(is_successful=False, message=message, hint=hint)


MISSING_DIRECTORY_RESULT = ChallengeResult.failed(
    "Working directory does not exist.",
    "Make sure you're in the correct directory.",
)

SETUP_FILE_TEMPLATE = "# {name}\n\nThis file is part of the scenario.\n"

# Hook signatures: receive the working directory and the repo inspector
SetupHook = Callable[[Path, RepoInspector], None]
ValidatorHook = Callable[[Path, RepoInspector], ChallengeResult]


def require_text(value: str | None, field_name: str) -> str:
    """Reject None, empty and whitespace-only strings."""
    if value is None or not str(value).strip():
        raise ChallengeConfigError(f"{field_name} cannot be empty")
    return value


# -----------------------------------------------------------------------------
# Base class
# -----------------------------------------------------------------------------

class Challenge(ABC):
    """Common surface of every challenge variant."""

    challenge_type: ChallengeType

    def __init__(self, id: str, description: str):
        self.id = require_text(id, "Challenge ID")
        self.description = require_text(description, "Description")

    @abstractmethod
    def setup(self, working_dir: Path | str) -> None:
        """Prepare the working directory before the player starts."""

    @abstractmethod
    def validate(self, working_dir: Path | str) -> ChallengeResult:
        """Judge the current state of the working directory."""

    @staticmethod
    def _require_directory(working_dir: Path | str) -> Path:
        path = Path(working_dir)
        if not path.is_dir():
            raise DirectoryMissingError(path)
        return path

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
