"""
Game progression state machine.

ACTIVE ──(enter an end room)──► COMPLETED

The transition happens at most once; `completed_at` records when.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum

from .schema import GameProgress, Player, Room, utcnow

logger = logging.getLogger(__name__)


class RoomNotFoundError(KeyError):
    """A room id does not exist in the loaded map."""

    def __init__(self, room_id: str):
        self.room_id = room_id
        super().__init__(room_id)

    def __str__(self) -> str:
        return f"Room '{self.room_id}' not found"


class GameStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class Game:
    """
    One play session: a player moving through a read-only room map.
    """

    def __init__(self, player: Player, start_room: Room, rooms: dict[str, Room]):
        self.player = player
        self.current_room = start_room
        self.rooms = rooms
        self._status = GameStatus.ACTIVE
        self.completed_at: datetime | None = None

    @property
    def status(self) -> GameStatus:
        return self._status

    @property
    def is_active(self) -> bool:
        return self._status == GameStatus.ACTIVE

    # -------------------------------------------------------------------------
    # Movement
    # -------------------------------------------------------------------------

    def move_to_room(self, room_id: str) -> bool:
        """
        Enter a room by id.

        Unknown ids return False and change nothing. Entering counts as
        a move and marks the room visited; entering an end room while
        active ends the game.
        """
        room = self.rooms.get(room_id)
        if room is None:
            return False

        self.current_room = room
        self.player.record_move()
        self.player.complete_room(room_id)

        if room.is_end_room and self.is_active:
            self._status = GameStatus.COMPLETED
            self.completed_at = utcnow()
            logger.info(f"{self.player.name} completed the game in {self.player.move_count} moves")

        return True

    def can_exit_in_direction(self, direction: str) -> bool:
        return direction.strip().lower() in self.current_room.exits

    def get_room_id_in_direction(self, direction: str) -> str | None:
        return self.current_room.exits.get(direction.strip().lower())

    # -------------------------------------------------------------------------
    # Challenges
    # -------------------------------------------------------------------------

    @property
    def current_challenge_completed(self) -> bool:
        """True when the current room has no challenge or it is done."""
        challenge = self.current_room.challenge
        return challenge is None or self.player.has_completed_challenge(challenge.id)

    def complete_current_challenge(self) -> None:
        challenge = self.current_room.challenge
        if challenge is not None:
            self.player.complete_challenge(challenge.id)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def to_progress(self) -> GameProgress:
        return GameProgress(
            player_name=self.player.name,
            current_room_id=self.current_room.id,
            completed_rooms=sorted(self.player.completed_rooms),
            completed_challenges=sorted(self.player.completed_challenges),
            move_count=self.player.move_count,
            game_started=self.player.game_started,
        )

    @classmethod
    def from_progress(cls, progress: GameProgress, rooms: dict[str, Room]) -> Game:
        """
        Rebuild a game from a snapshot.

        Raises:
            RoomNotFoundError: the saved room is not in `rooms`
        """
        room = rooms.get(progress.current_room_id)
        if room is None:
            raise RoomNotFoundError(progress.current_room_id)

        player = Player(
            name=progress.player_name,
            completed_rooms=set(progress.completed_rooms),
            completed_challenges=set(progress.completed_challenges),
            move_count=progress.move_count,
            game_started=progress.game_started,
        )
        return cls(player, room, rooms)

    def __repr__(self) -> str:
        return f"Game(player={self.player.name!r}, room={self.current_room.id!r}, status={self._status.value})"
