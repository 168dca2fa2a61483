"""
Temporary working directories for play sessions.

Each session gets its own directory under
`<tmp>/gitdungeon/<prefix>/<uuid>` so the player's git commands
never touch a real project.
"""

from __future__ import annotations

import logging
import shutil
import tempfile
import uuid
from pathlib import Path

from .inspector import DirectoryMissingError

logger = logging.getLogger(__name__)


class WorkspaceManager:
    """
    Creates and removes throwaway directories.

    Cleanup is best-effort: failures are logged, never raised, and
    removing a directory twice is harmless.
    """

    def __init__(self, root: Path | str | None = None):
        base = Path(root) if root else Path(tempfile.gettempdir())
        self.root = base / "gitdungeon"
        self._created: list[Path] = []

    @property
    def created(self) -> list[Path]:
        return list(self._created)

    def create_directory(self, prefix: str = "challenge") -> Path:
        """Create a new, empty, uniquely named directory."""
        prefix = prefix.strip() or "challenge"
        path = self.root / prefix / uuid.uuid4().hex
        path.mkdir(parents=True, exist_ok=False)
        self._created.append(path)
        logger.debug(f"Created workspace {path}")
        return path

    def create_file(self, directory: Path | str, name: str, content: str = "") -> Path:
        """
        Write a file inside an existing directory.

        Raises:
            DirectoryMissingError: directory does not exist
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise DirectoryMissingError(directory)

        target = directory / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
        return target

    def file_exists(self, directory: Path | str, name: str) -> bool:
        return (Path(directory) / name).is_file()

    def cleanup_directory(self, directory: Path | str) -> bool:
        """Remove one directory tree. Returns True if it is gone afterwards."""
        path = Path(directory)
        if not path.exists():
            self._forget(path)
            return True

        try:
            shutil.rmtree(path)
        except OSError as e:
            logger.warning(f"Could not remove workspace {path}: {e}")
            return False

        self._forget(path)
        logger.debug(f"Removed workspace {path}")
        return True

    def cleanup_all(self) -> None:
        """Remove every directory this manager created."""
        for path in list(self._created):
            self.cleanup_directory(path)

    def _forget(self, path: Path) -> None:
        if path in self._created:
            self._created.remove(path)

    def __enter__(self) -> WorkspaceManager:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup_all()
