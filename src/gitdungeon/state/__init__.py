"""State management for git dungeon sessions."""

from .schema import GameProgress, Player, Room, DEFAULT_PLAYER_NAME
from .game import Game, GameStatus, RoomNotFoundError
from .store import JsonProgressStore, MemoryProgressStore, ProgressStore
from .manager import GameManager, GameSessionResult, RoomSource, SaveResult
from .event_bus import (
    EventBus,
    EventType,
    GameEvent,
    get_event_bus,
    reset_event_bus,
)

__all__ = [
    # Schema
    "DEFAULT_PLAYER_NAME",
    "GameProgress",
    "Player",
    "Room",
    # Game
    "Game",
    "GameStatus",
    "RoomNotFoundError",
    # Persistence
    "GameManager",
    "GameSessionResult",
    "JsonProgressStore",
    "MemoryProgressStore",
    "ProgressStore",
    "RoomSource",
    "SaveResult",
    # Events
    "EventBus",
    "EventType",
    "GameEvent",
    "get_event_bus",
    "reset_event_bus",
]
