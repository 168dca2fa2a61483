"""Git access: subprocess wrapper and temporary workspaces."""

from .inspector import (
    DirectoryMissingError,
    GitCommandResult,
    GitError,
    GitInspector,
    RepoInspector,
    count_log_lines,
    parse_branches,
)
from .workspace import WorkspaceManager

__all__ = [
    "DirectoryMissingError",
    "GitCommandResult",
    "GitError",
    "GitInspector",
    "RepoInspector",
    "WorkspaceManager",
    "count_log_lines",
    "parse_branches",
]
