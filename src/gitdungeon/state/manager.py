"""
Game session lifecycle.

Start a fresh game, save the current one, load or delete the saved
one. Every operation returns a result object with a player-facing
message instead of raising.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .event_bus import EventBus, EventType, get_event_bus
from .game import Game, RoomNotFoundError
from .schema import DEFAULT_PLAYER_NAME, Player, Room
from .store import JsonProgressStore, ProgressStore

logger = logging.getLogger(__name__)


class RoomSource(Protocol):
    """Where the room map comes from (see gitdungeon.rooms.RoomRepository)."""

    def load_rooms(self) -> dict[str, Room]:
        ...

    def get_start_room(self) -> Room | None:
        ...


@dataclass
class GameSessionResult:
    """Result of starting or loading a game."""
    success: bool
    game: Game | None
    message: str


@dataclass
class SaveResult:
    success: bool
    message: str


class GameManager:
    """
    Manages game lifecycle.

    Storage is delegated to a ProgressStore implementation:
    - JsonProgressStore for production (file-based)
    - MemoryProgressStore for testing (in-memory)
    """

    def __init__(
        self,
        store: ProgressStore | Path | str,
        room_repository: RoomSource,
        event_bus: EventBus | None = None,
    ):
        """
        Args:
            store: ProgressStore instance, or a save directory for JsonProgressStore
            room_repository: Supplies the room map
            event_bus: Defaults to the global bus
        """
        if isinstance(store, (Path, str)):
            store = JsonProgressStore(store)
        self.store = store
        self.room_repository = room_repository
        self.event_bus = event_bus or get_event_bus()

    def start_game(self, player_name: str | None = None) -> GameSessionResult:
        """Create a new game in the start room. Blank names become the default."""
        if not player_name or not player_name.strip():
            player_name = DEFAULT_PLAYER_NAME
        player_name = player_name.strip()

        rooms = self.room_repository.load_rooms()
        if not rooms:
            return GameSessionResult(False, None, "No rooms found. Cannot start game.")

        start_room = self.room_repository.get_start_room()
        if start_room is None:
            return GameSessionResult(False, None, "No starting room found. Cannot start game.")

        game = Game(Player(name=player_name), start_room, rooms)
        logger.info(f"Started new game for {player_name}")
        self.event_bus.emit(EventType.GAME_STARTED, player=player_name, room_id=start_room.id)
        return GameSessionResult(True, game, f"Game started! Welcome, {player_name}!")

    def save_progress(self, game: Game | None) -> SaveResult:
        if game is None:
            return SaveResult(False, "Cannot save: No active game.")

        try:
            self.store.save(game.to_progress())
        except Exception as e:
            logger.error(f"Failed to save game: {e}")
            return SaveResult(False, f"Failed to save game: {e}")

        self.event_bus.emit(EventType.GAME_SAVED, player=game.player.name, room_id=game.current_room.id)
        return SaveResult(True, f"Game progress saved successfully for {game.player.name}.")

    def load_progress(self) -> GameSessionResult:
        """Rebuild the saved game against the current room map."""
        if not self.store.exists():
            return GameSessionResult(False, None, "No saved game found.")

        try:
            progress = self.store.load()
            if progress is None:
                return GameSessionResult(False, None, "Failed to load saved game.")

            rooms = self.room_repository.load_rooms()
            if not rooms:
                return GameSessionResult(False, None, "No rooms found. Cannot load game.")

            game = Game.from_progress(progress, rooms)
        except RoomNotFoundError as e:
            logger.warning(f"Save references unknown room {e.room_id}")
            return GameSessionResult(False, None, f"Saved room '{e.room_id}' not found.")
        except Exception as e:
            logger.error(f"Failed to load game: {e}")
            return GameSessionResult(False, None, f"Failed to load game: {e}")

        logger.info(f"Loaded game for {progress.player_name} in {progress.current_room_id}")
        self.event_bus.emit(EventType.GAME_LOADED, player=progress.player_name, room_id=progress.current_room_id)
        return GameSessionResult(
            True,
            game,
            f"Game loaded successfully! Welcome back, {progress.player_name}.",
        )

    def has_saved_progress(self) -> bool:
        return self.store.exists()

    def delete_progress(self) -> bool:
        deleted = self.store.delete()
        if deleted:
            logger.info("Deleted saved progress")
        return deleted
