"""Game systems: the command vocabulary and the engine."""

from .engine import CommandResult, CommandType, GameEngine, GameState

__all__ = ["CommandResult", "CommandType", "GameEngine", "GameState"]
