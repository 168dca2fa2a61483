"""
Pydantic models for game state.

Room is the static map data; Player and GameProgress are the mutable
and persisted halves of a session.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..challenges.base import Challenge

DEFAULT_PLAYER_NAME = "Adventurer"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# Map
# -----------------------------------------------------------------------------

class Room(BaseModel):
    """
    One location on the map.

    Direction keys are stored lower-case. End rooms have no exits;
    every other room should have at least one.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str
    name: str
    description: str = ""
    narrative: str = ""
    challenge: Challenge | None = None
    exits: dict[str, str] = Field(default_factory=dict)
    is_start_room: bool = False
    is_end_room: bool = False

    @field_validator("exits")
    @classmethod
    def _lowercase_directions(cls, exits: dict[str, str]) -> dict[str, str]:
        return {direction.strip().lower(): target for direction, target in exits.items()}

    @property
    def exit_list(self) -> str:
        """Comma separated exit directions, for messages."""
        return ", ".join(self.exits)


# -----------------------------------------------------------------------------
# Player
# -----------------------------------------------------------------------------

class Player(BaseModel):
    """The adventurer: name plus progress counters."""
    name: str = DEFAULT_PLAYER_NAME
    completed_rooms: set[str] = Field(default_factory=set)
    completed_challenges: set[str] = Field(default_factory=set)
    move_count: int = Field(default=0, ge=0)
    game_started: datetime = Field(default_factory=utcnow)

    def record_move(self) -> None:
        self.move_count += 1

    def complete_room(self, room_id: str) -> None:
        self.completed_rooms.add(room_id)

    def complete_challenge(self, challenge_id: str) -> None:
        self.completed_challenges.add(challenge_id)

    def has_completed_room(self, room_id: str) -> bool:
        return room_id in self.completed_rooms

    def has_completed_challenge(self, challenge_id: str) -> bool:
        return challenge_id in self.completed_challenges

    def completion_percentage(self, total_rooms: int) -> float:
        """Share of rooms visited, 0-100. Zero when there are no rooms."""
        if total_rooms <= 0:
            return 0.0
        return len(self.completed_rooms) / total_rooms * 100


# -----------------------------------------------------------------------------
# Persistence snapshot
# -----------------------------------------------------------------------------

class GameProgress(BaseModel):
    """Everything needed to rebuild a Game against the same room map."""
    player_name: str
    current_room_id: str
    completed_rooms: list[str] = Field(default_factory=list)
    completed_challenges: list[str] = Field(default_factory=list)
    move_count: int = Field(default=0, ge=0)
    saved_at: datetime = Field(default_factory=utcnow)
    game_started: datetime = Field(default_factory=utcnow)
