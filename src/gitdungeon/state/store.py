"""
Progress storage abstraction.

Separates persistence from game logic for testability. There is one
save slot per save directory.
"""

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import ValidationError

from .schema import GameProgress

logger = logging.getLogger(__name__)

DEFAULT_SAVE_DIR = "~/.gitdungeon"
SAVE_FILE_NAME = "save.json"


@runtime_checkable
class ProgressStore(Protocol):
    """
    Abstract storage interface for saved progress.

    Implementations:
    - JsonProgressStore: File-based persistence (production)
    - MemoryProgressStore: In-memory storage (testing)
    """

    def save(self, progress: GameProgress) -> None:
        """Persist a snapshot, replacing any previous one."""
        ...

    def load(self) -> GameProgress | None:
        """Load the snapshot. Returns None if absent or unreadable."""
        ...

    def exists(self) -> bool:
        """Check if a snapshot exists."""
        ...

    def delete(self) -> bool:
        """Delete the snapshot. Returns True if deleted."""
        ...


class JsonProgressStore:
    """
    File-based progress storage using JSON.

    Features:
    - Automatic backup of the previous save (`save.json.bak`)
    - Corrupt files load as None instead of raising
    """

    def __init__(self, save_dir: Path | str = DEFAULT_SAVE_DIR):
        self.save_dir = Path(save_dir).expanduser()
        self.save_dir.mkdir(parents=True, exist_ok=True)
        self.save_file = self.save_dir / SAVE_FILE_NAME

    def save(self, progress: GameProgress) -> None:
        """Save snapshot to JSON file with backup."""
        # Backup previous save
        if self.save_file.exists():
            backup = self.save_file.with_suffix(".json.bak")
            backup.write_text(self.save_file.read_text())

        self.save_file.write_text(progress.model_dump_json(indent=2))
        logger.info(f"Saved progress to {self.save_file}")

    def load(self) -> GameProgress | None:
        if not self.save_file.exists():
            return None

        try:
            data = json.loads(self.save_file.read_text())
            return GameProgress.model_validate(data)
        except (json.JSONDecodeError, ValidationError, OSError) as e:
            logger.warning(f"Could not read save file {self.save_file}: {e}")
            return None

    def exists(self) -> bool:
        return self.save_file.exists()

    def delete(self) -> bool:
        if self.save_file.exists():
            self.save_file.unlink()
            return True
        return False


class MemoryProgressStore:
    """
    In-memory progress storage for testing.

    No file I/O - the snapshot lives in memory.
    """

    def __init__(self):
        self.progress: GameProgress | None = None

    def save(self, progress: GameProgress) -> None:
        # Copy so later mutation of the caller's object is not persisted
        self.progress = progress.model_copy(deep=True)

    def load(self) -> GameProgress | None:
        if self.progress is None:
            return None
        return self.progress.model_copy(deep=True)

    def exists(self) -> bool:
        return self.progress is not None

    def delete(self) -> bool:
        if self.progress is None:
            return False
        self.progress = None
        return True
