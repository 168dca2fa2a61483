"""
Game events.

The engine and the session manager announce what happened; the
console front end listens (see interface.cli.SessionTally) and keeps
its own account of the run without the engine knowing about it.

Usage:
    bus = get_event_bus()
    bus.on(EventType.CHALLENGE_COMPLETED, lambda e: print(e.data["challenge_id"]))
    bus.emit(EventType.CHALLENGE_COMPLETED, player="Ada", challenge_id="staging-area-challenge")
"""

import logging
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


class EventType(Enum):
    # Session
    GAME_STARTED = "game.started"
    GAME_LOADED = "game.loaded"
    GAME_SAVED = "game.saved"
    GAME_COMPLETED = "game.completed"

    # Progress
    ROOM_ENTERED = "room.entered"
    CHALLENGE_COMPLETED = "challenge.completed"

    # Git passthrough
    GIT_EXECUTED = "git.executed"


@dataclass
class GameEvent:
    """One announcement: its type, the player it concerns and a payload."""

    type: EventType
    data: dict = field(default_factory=dict)
    player: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.type.value}] {self.data}"


EventHandler = Callable[[GameEvent], None]


class EventBus:
    """
    Synchronous publish/subscribe.

    Handlers run inside emit(), in subscription order. A handler that
    raises is logged and skipped; the emitter never sees the error.
    The last HISTORY_LIMIT events are kept for inspection.
    """

    def __init__(self):
        self._listeners: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._history: deque[GameEvent] = deque(maxlen=HISTORY_LIMIT)

    def on(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._listeners[event_type]
        if handler not in handlers:
            handlers.append(handler)

    def off(self, event_type: EventType, handler: EventHandler) -> None:
        handlers = self._listeners.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event_type: EventType, player: str = "", **data) -> GameEvent:
        event = GameEvent(type=event_type, data=data, player=player)
        self._history.append(event)

        for handler in list(self._listeners.get(event_type, [])):
            try:
                handler(event)
            except Exception as e:
                logger.warning(f"Listener for {event_type.value} failed: {e}")

        return event

    def clear(self) -> None:
        """Drop every listener (history is kept)."""
        self._listeners.clear()

    def get_history(self, event_type: EventType | None = None) -> list[GameEvent]:
        return [e for e in self._history if event_type is None or e.type == event_type]

    def listener_count(self, event_type: EventType) -> int:
        return len(self._listeners.get(event_type, []))


_event_bus: EventBus | None = None


def get_event_bus() -> EventBus:
    """Process-wide bus shared by the engine, the manager and the CLI."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus


def reset_event_bus() -> None:
    global _event_bus
    _event_bus = None
