"""Loads the room map once and serves lookups from the cache."""

from __future__ import annotations

import logging

from ..git.inspector import RepoInspector
from ..state.schema import Room
from .catalog import ROOM_BUILDERS, RoomBuilder

logger = logging.getLogger(__name__)


class RoomRepository:
    """
    Builds every room from the catalog on first use.

    Later calls to load_rooms() return the identical dict, so challenge
    instances (and a quiz's answer slot) live for the whole session.
    """

    def __init__(self, inspector: RepoInspector, builders: list[RoomBuilder] | None = None):
        if inspector is None:
            raise TypeError("inspector is required")
        self.inspector = inspector
        self.builders = list(ROOM_BUILDERS if builders is None else builders)
        self._rooms: dict[str, Room] | None = None

    def load_rooms(self) -> dict[str, Room]:
        if self._rooms is not None:
            return self._rooms

        rooms: dict[str, Room] = {}
        for build in self.builders:
            room = build(self.inspector)
            if room.id in rooms:
                raise ValueError(f"Duplicate room id: {room.id}")
            rooms[room.id] = room

        logger.info(f"Loaded {len(rooms)} rooms")
        self._rooms = rooms
        return rooms

    def get_room(self, room_id: str) -> Room | None:
        return self.load_rooms().get(room_id)

    def get_start_room(self) -> Room | None:
        return next((room for room in self.load_rooms().values() if room.is_start_room), None)
