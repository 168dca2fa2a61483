"""
Repository challenge: the player must bring a git working tree into
a required state.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..git.inspector import RepoInspector
from .base import (
    MISSING_DIRECTORY_RESULT,
    SETUP_FILE_TEMPLATE,
    Challenge,
    ChallengeConfigError,
    ChallengeResult,
    ChallengeType,
    SetupHook,
    ValidatorHook,
)
from .criteria import Criterion, build_criteria, run_criteria

logger = logging.getLogger(__name__)


class RepositoryChallenge(Challenge):
    """
    Validates a working tree against declared requirements.

    A custom validator, when given, replaces the declarative criteria
    entirely. A custom setup runs after the static setup files are
    written.
    """

    challenge_type = ChallengeType.REPOSITORY
    success_message = "Challenge completed successfully! The repository is in order."

    def __init__(
        self,
        id: str,
        description: str,
        inspector: RepoInspector,
        *,
        require_git_init: bool = False,
        required_files: list[str] | None = None,
        required_branches: list[str] | None = None,
        required_current_branch: str | None = None,
        required_commit_count: int | None = None,
        require_clean_status: bool = False,
        setup_files: list[str] | None = None,
        custom_setup: SetupHook | None = None,
        custom_validator: ValidatorHook | None = None,
    ):
        super().__init__(id, description)
        if inspector is None:
            raise TypeError("inspector is required")
        if required_commit_count is not None and required_commit_count < 0:
            raise ChallengeConfigError("required_commit_count cannot be negative")

        self.inspector = inspector
        self.require_git_init = require_git_init
        self.required_files = list(required_files or [])
        self.required_branches = list(required_branches or [])
        self.required_current_branch = required_current_branch
        self.required_commit_count = required_commit_count
        self.require_clean_status = require_clean_status
        self.setup_files = list(setup_files or [])
        self.custom_setup = custom_setup
        self.custom_validator = custom_validator

        self.criteria: list[Criterion] = build_criteria(
            inspector,
            require_git_init=require_git_init,
            required_files=self.required_files,
            required_branches=self.required_branches,
            required_current_branch=required_current_branch,
            required_commit_count=required_commit_count,
            require_clean_status=require_clean_status,
        )

    def setup(self, working_dir: Path | str) -> None:
        """
        Write missing setup files, then run the custom setup hook.

        Existing files are left untouched.

        Raises:
            DirectoryMissingError: working_dir does not exist
        """
        directory = self._require_directory(working_dir)

        for file_name in self.setup_files:
            target = directory / file_name
            if not target.exists():
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(SETUP_FILE_TEMPLATE.format(name=file_name))

        if self.custom_setup is not None:
            self.custom_setup(directory, self.inspector)

    def validate(self, working_dir: Path | str) -> ChallengeResult:
        directory = Path(working_dir)
        if not directory.is_dir():
            return MISSING_DIRECTORY_RESULT

        try:
            if self.custom_validator is not None:
                return self.custom_validator(directory, self.inspector)

            failure = run_criteria(self.criteria, directory)
        except Exception as e:
            # Inspector and hook failures become failed results
            logger.warning(f"Validation of {self.id} could not inspect {directory}: {e}")
            return ChallengeResult.failed(
                f"Could not inspect the repository: {e}",
                "Check the repository with 'git status' and try again.",
            )

        if failure is not None:
            return failure
        return ChallengeResult.passed(self.success_message)
