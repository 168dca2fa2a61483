"""
Declarative repository criteria.

The flat set of requirements a repository or scenario challenge can
declare is compiled into an ordered list of Criterion objects. The
list order is the evaluation order, and evaluation stops at the
first failure:

    1. repository initialized
    2. each required file
    3. each required branch
    4. required current branch
    5. minimum commit count
    6. clean working tree
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ..git.inspector import RepoInspector, count_log_lines, parse_branches
from .base import ChallengeResult

CLEAN_STATUS_MARKERS = (
    "nothing to commit, working tree clean",
    "nothing added to commit",
)

# Extra log lines fetched beyond the requirement when counting commits
COMMIT_LOG_SLACK = 10


@dataclass(frozen=True)
class Criterion:
    """
    One named check.

    `check` receives the working directory and a scratch dict it may
    fill with values for the failure message template.
    """
    name: str
    check: Callable[[Path, dict], bool]
    message: str
    hint: str

    def evaluate(self, working_dir: Path) -> ChallengeResult | None:
        """Return a failed result, or None when the check passes."""
        details: dict = {}
        if self.check(working_dir, details):
            return None
        message = self.message.format(**details) if details else self.message
        return ChallengeResult.failed(message, self.hint)


def build_criteria(
    inspector: RepoInspector,
    *,
    require_git_init: bool = False,
    required_files: list[str] | None = None,
    required_branches: list[str] | None = None,
    required_current_branch: str | None = None,
    required_commit_count: int | None = None,
    require_clean_status: bool = False,
) -> list[Criterion]:
    """Compile declared requirements into the ordered criterion list."""
    criteria: list[Criterion] = []

    if require_git_init:
        criteria.append(Criterion(
            name="repository",
            check=lambda d, _: inspector.is_repository(d),
            message="This directory is not a git repository.",
            hint="Try running 'git init' to initialize a repository.",
        ))

    for file_name in required_files or []:
        criteria.append(Criterion(
            name=f"file:{file_name}",
            check=lambda d, _, f=file_name: (d / f).is_file(),
            message=f"Required file '{file_name}' not found.",
            hint=f"The scenario requires the file '{file_name}' to exist.",
        ))

    for branch in required_branches or []:
        criteria.append(Criterion(
            name=f"branch:{branch}",
            check=lambda d, _, b=branch: b in parse_branches(inspector.get_branches(d))[0],
            message=f"Required branch '{branch}' not found.",
            hint=f"Try creating the branch with 'git branch {branch}'",
        ))

    if required_current_branch and required_current_branch.strip():
        target = required_current_branch.strip()
        criteria.append(Criterion(
            name="current-branch",
            check=lambda d, _: parse_branches(inspector.get_branches(d))[1] == target,
            message=f"You must be on the '{target}' branch.",
            hint=f"Switch to the branch with 'git checkout {target}'",
        ))

    if required_commit_count is not None:
        minimum = required_commit_count

        def enough_commits(d: Path, details: dict) -> bool:
            found = count_log_lines(inspector.get_log(d, minimum + COMMIT_LOG_SLACK))
            details["found"] = found
            return found >= minimum

        criteria.append(Criterion(
            name="commit-count",
            check=enough_commits,
            message=f"Expected at least {minimum} commit(s), but found {{found}}.",
            hint="Try creating a commit with 'git commit -m \"your message\"'",
        ))

    if require_clean_status:
        criteria.append(Criterion(
            name="clean-status",
            check=lambda d, _: is_clean_status(inspector.get_status(d)),
            message="Working tree is not clean.",
            hint="Make sure all changes are committed. Use 'git status' to check.",
        ))

    return criteria


def run_criteria(criteria: list[Criterion], working_dir: Path) -> ChallengeResult | None:
    """Evaluate in order; return the first failure or None if all pass."""
    for criterion in criteria:
        failure = criterion.evaluate(working_dir)
        if failure is not None:
            return failure
    return None


def is_clean_status(status: str) -> bool:
    return any(marker in status for marker in CLEAN_STATUS_MARKERS)
