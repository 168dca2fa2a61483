"""Fallback hints per challenge variant."""

from __future__ import annotations

from .base import Challenge, ChallengeType

QUIZ_HINT = "Read the question carefully and think about what each command does."
REPOSITORY_HINT = "Read the room narrative carefully for clues about what git commands to use."
SCENARIO_HINT = "Consider what git commands would help in this scenario."


def default_hint(challenge: Challenge) -> str:
    """The hint shown by the `hint` command: a quiz's own hint, else a generic one."""
    kind = challenge.challenge_type
    if kind == ChallengeType.QUIZ:
        return getattr(challenge, "hint", None) or QUIZ_HINT
    elif kind == ChallengeType.REPOSITORY:
        return REPOSITORY_HINT
    elif kind == ChallengeType.SCENARIO:
        return SCENARIO_HINT
    raise ValueError(f"Unknown challenge type: {kind}")
