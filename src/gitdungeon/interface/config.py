"""
User configuration persistence.

Stores settings like the default player name and git timeout in a
JSON file next to the save slot.
"""

import json
from pathlib import Path
from typing import TypedDict

from ..state.store import DEFAULT_SAVE_DIR


class Config(TypedDict, total=False):
    """User configuration."""
    player_name: str | None  # Pre-fills the name prompt
    animate_banner: bool  # Show animated banner on startup
    git_timeout: float | None  # Seconds before a git command is abandoned; None waits forever
    log_level: str  # DEBUG, INFO, WARNING, ...
    workspace_root: str | None  # Parent of the per-session temp directories


DEFAULT_CONFIG: Config = {
    "player_name": None,
    "animate_banner": True,
    "git_timeout": None,
    "log_level": "INFO",
    "workspace_root": None,
}


def get_config_path(save_dir: Path | str = DEFAULT_SAVE_DIR) -> Path:
    """Get path to config file."""
    return Path(save_dir).expanduser() / ".gitdungeon_config.json"


def load_config(save_dir: Path | str = DEFAULT_SAVE_DIR) -> Config:
    """Load config from file, or return defaults if not found."""
    path = get_config_path(save_dir)

    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
        if not isinstance(saved, dict):
            return DEFAULT_CONFIG.copy()
        # Merge with defaults to handle missing keys
        config = DEFAULT_CONFIG.copy()
        config.update(saved)
        return config
    except (json.JSONDecodeError, IOError):
        return DEFAULT_CONFIG.copy()


def save_config(config: Config, save_dir: Path | str = DEFAULT_SAVE_DIR) -> bool:
    """Save config to file. Returns True on success."""
    path = get_config_path(save_dir)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except IOError:
        return False


def set_player_name(name: str | None, save_dir: Path | str = DEFAULT_SAVE_DIR) -> None:
    """Remember the last player name for the next name prompt."""
    config = load_config(save_dir)
    config["player_name"] = name
    save_config(config, save_dir)


def set_git_timeout(seconds: float | None, save_dir: Path | str = DEFAULT_SAVE_DIR) -> None:
    """Save git timeout; None disables it."""
    if seconds is not None and seconds <= 0:
        raise ValueError("git_timeout must be positive or None")
    config = load_config(save_dir)
    config["git_timeout"] = seconds
    save_config(config, save_dir)
