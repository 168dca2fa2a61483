"""Room map: catalog content and the cached repository."""

from .catalog import ROOM_BUILDERS, RoomBuilder
from .repository import RoomRepository

__all__ = ["ROOM_BUILDERS", "RoomBuilder", "RoomRepository"]
