"""git dungeon: a console adventure that teaches git one room at a time."""

__version__ = "0.1.0"
