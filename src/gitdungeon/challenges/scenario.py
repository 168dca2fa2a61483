"""Story-driven variant of the repository challenge."""

from __future__ import annotations

from ..git.inspector import RepoInspector
from .base import ChallengeType, require_text
from .repository import RepositoryChallenge


class ScenarioChallenge(RepositoryChallenge):
    """Repository criteria plus a narrative the player reads first."""

    challenge_type = ChallengeType.SCENARIO
    success_message = "Scenario completed successfully! The story continues..."

    def __init__(
        self,
        id: str,
        description: str,
        scenario: str,
        inspector: RepoInspector,
        **criteria,
    ):
        require_text(scenario, "Scenario")
        super().__init__(id, description, inspector, **criteria)
        self.scenario = scenario
