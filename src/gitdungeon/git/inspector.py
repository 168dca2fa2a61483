"""
Git subprocess wrapper.

Runs the real `git` binary against a working directory and parses
its textual output into the handful of queries challenges need.

Calls are synchronous: one invocation finishes before the next
begins.
"""

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


# Exit code reported when a configured timeout expires (mirrors coreutils `timeout`)
TIMEOUT_EXIT_CODE = 124

# Errors git prints for `log`/`reflog` in a repository with no commits yet
EMPTY_HISTORY_MARKERS = (
    "does not have any commits yet",
    "your current branch",
    "fatal: bad default revision",
)

# Status text that signals an in-progress, unresolved merge
CONFLICT_MARKERS = (
    "both modified",
    "both added",
    "Unmerged paths",
    "fix conflicts",
)


class DirectoryMissingError(FileNotFoundError):
    """A working directory that should exist does not."""

    def __init__(self, path: Path | str):
        self.path = str(path)
        super().__init__(f"Working directory not found: {self.path}")


class GitError(RuntimeError):
    """A git query returned a nonzero exit code."""

    def __init__(self, action: str, detail: str):
        self.action = action
        self.detail = detail
        super().__init__(f"Failed to {action}: {detail}")


@dataclass(frozen=True)
class GitCommandResult:
    """Result from a single git invocation."""
    success: bool
    output: str
    error: str
    exit_code: int


@runtime_checkable
class RepoInspector(Protocol):
    """
    Everything the game needs to know about a working tree.

    Implementations:
    - GitInspector: shells out to git (production)
    - test doubles in tests/conftest.py
    """

    def execute(self, command: str, working_dir: Path | str) -> GitCommandResult:
        """Run `git <command>` in working_dir."""
        ...

    def is_repository(self, directory: Path | str) -> bool:
        ...

    def get_status(self, working_dir: Path | str) -> str:
        ...

    def get_log(self, working_dir: Path | str, max_count: int = 10) -> str:
        ...

    def get_reflog(self, working_dir: Path | str, max_count: int = 10) -> str:
        ...

    def get_tags(self, working_dir: Path | str) -> str:
        ...

    def get_stash_list(self, working_dir: Path | str) -> str:
        ...

    def get_remotes(self, working_dir: Path | str) -> str:
        ...

    def get_branches(self, working_dir: Path | str) -> str:
        ...

    def get_current_branch(self, working_dir: Path | str) -> str:
        ...

    def has_conflicts(self, working_dir: Path | str) -> bool:
        ...


class GitInspector:
    """
    RepoInspector backed by the git executable.

    Editors and credential prompts are disabled through the
    environment so a command can never sit waiting for input.
    `timeout` is None by default: slow operations are allowed to
    finish.
    """

    git_binary: str = "git"

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    @classmethod
    def is_installed(cls) -> bool:
        """Check if git is on PATH and answers `git --version`."""
        if shutil.which(cls.git_binary) is None:
            return False
        try:
            result = subprocess.run(
                [cls.git_binary, "--version"],
                capture_output=True,
                text=True,
                timeout=5,
            )
        except (OSError, subprocess.TimeoutExpired):
            return False
        return result.returncode == 0

    def _environment(self) -> dict[str, str]:
        env = dict(os.environ)
        env["GIT_EDITOR"] = "true"
        env["GIT_SEQUENCE_EDITOR"] = "true"
        env["GIT_TERMINAL_PROMPT"] = "0"
        return env

    def execute(self, command: str, working_dir: Path | str) -> GitCommandResult:
        """
        Run a git command and capture its output.

        Args:
            command: Arguments after `git`, e.g. 'commit -m "msg"'
            working_dir: Directory to run in

        Returns:
            GitCommandResult; a nonzero exit is a failed result, not an exception

        Raises:
            ValueError: command or working_dir is blank
            DirectoryMissingError: working_dir does not exist
        """
        if not command or not command.strip():
            raise ValueError("Command cannot be empty")
        if not working_dir or not str(working_dir).strip():
            raise ValueError("Working directory cannot be empty")

        directory = Path(working_dir)
        if not directory.is_dir():
            raise DirectoryMissingError(directory)

        try:
            args = shlex.split(command)
        except ValueError as e:
            return GitCommandResult(
                success=False,
                output="",
                error=f"Could not parse command: {e}",
                exit_code=2,
            )

        logger.debug(f"git {command} (cwd={directory})")

        try:
            result = subprocess.run(
                [self.git_binary, *args],
                cwd=directory,
                capture_output=True,
                text=True,
                env=self._environment(),
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"git {command} timed out after {self.timeout}s")
            return GitCommandResult(
                success=False,
                output="",
                error=f"Timeout after {self.timeout}s",
                exit_code=TIMEOUT_EXIT_CODE,
            )

        return GitCommandResult(
            success=result.returncode == 0,
            output=result.stdout.rstrip(),
            error=result.stderr.rstrip(),
            exit_code=result.returncode,
        )

    def _query(self, command: str, working_dir: Path | str, action: str) -> str:
        """Run a read-only command, raising GitError on failure."""
        result = self.execute(command, working_dir)
        if not result.success:
            raise GitError(action, result.error or f"exit code {result.exit_code}")
        return result.output

    def is_repository(self, directory: Path | str) -> bool:
        path = Path(directory)
        if not path.is_dir():
            return False
        if (path / ".git").is_dir():
            return True

        try:
            result = self.execute("rev-parse --is-inside-work-tree", path)
        except (OSError, ValueError):
            return False
        return result.success and result.output.strip().lower() == "true"

    def get_status(self, working_dir: Path | str) -> str:
        return self._query("status", working_dir, "get git status")

    def get_log(self, working_dir: Path | str, max_count: int = 10) -> str:
        """One line per commit (`--oneline`); empty string when there are none."""
        result = self.execute(f"log --oneline -n {max_count}", working_dir)
        if result.success:
            return result.output
        if any(marker in result.error for marker in EMPTY_HISTORY_MARKERS):
            return ""
        raise GitError("get git log", result.error)

    def get_reflog(self, working_dir: Path | str, max_count: int = 10) -> str:
        result = self.execute(f"reflog -n {max_count}", working_dir)
        if result.success:
            return result.output
        if any(marker in result.error for marker in EMPTY_HISTORY_MARKERS):
            return ""
        raise GitError("get git reflog", result.error)

    def get_tags(self, working_dir: Path | str) -> str:
        return self._query("tag -l", working_dir, "get git tags")

    def get_stash_list(self, working_dir: Path | str) -> str:
        return self._query("stash list", working_dir, "get git stash list")

    def get_remotes(self, working_dir: Path | str) -> str:
        return self._query("remote -v", working_dir, "get git remotes")

    def get_branches(self, working_dir: Path | str) -> str:
        return self._query("branch", working_dir, "get git branches")

    def get_current_branch(self, working_dir: Path | str) -> str:
        return self._query("branch --show-current", working_dir, "get current branch").strip()

    def has_conflicts(self, working_dir: Path | str) -> bool:
        """Heuristic: does `git status` describe unmerged paths?"""
        try:
            status = self.get_status(working_dir)
        except (GitError, OSError) as e:
            logger.warning(f"Could not read status for conflict check: {e}")
            return False
        return any(marker in status for marker in CONFLICT_MARKERS)


# -----------------------------------------------------------------------------
# Output parsing helpers
# -----------------------------------------------------------------------------

def parse_branches(branch_output: str) -> tuple[list[str], str | None]:
    """
    Parse `git branch` output.

    Returns (branch names, current branch or None).
    """
    names: list[str] = []
    current = None
    for line in branch_output.splitlines():
        line = line.strip()
        if not line:
            continue
        is_current = line.startswith("*")
        name = line.lstrip("*").strip()
        # Detached HEAD shows up as "(HEAD detached at abc123)"
        if name.startswith("("):
            continue
        names.append(name)
        if is_current:
            current = name
    return names, current


def count_log_lines(log_output: str) -> int:
    """Number of commits in `git log --oneline` output."""
    if not log_output or not log_output.strip():
        return 0
    return len([line for line in log_output.split("\n") if line.strip()])
