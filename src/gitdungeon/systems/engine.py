"""
Game engine: turns one line of player input into one CommandResult.

Dispatch order:
    help | status | look/examine | go/forward/back | answer | hint
    | save | exit | git <args>

After every git passthrough command the current room's challenge is
re-validated, so the player never has to ask for a check. Nothing
raises out of process_command(); failures come back as results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable

from ..challenges import AnswerOutOfRangeError, ChallengeType, QuizChallenge, default_hint
from ..git.inspector import DirectoryMissingError, GitError, RepoInspector
from .command_registry import CommandRegistry, get_registry
from ..state.event_bus import EventBus, EventType, get_event_bus
from ..state.game import Game
from ..state.manager import SaveResult

logger = logging.getLogger(__name__)

EXIT_SENTINEL = "EXIT_REQUESTED"

SaveHandler = Callable[[Game], SaveResult]


class CommandType(str, Enum):
    UNKNOWN = "unknown"
    HELP = "help"
    STATUS = "status"
    LOOK = "look"
    MOVEMENT = "movement"
    GIT = "git"
    ANSWER = "answer"
    HINT = "hint"
    SAVE = "save"
    EXIT = "exit"


@dataclass
class CommandResult:
    """What the player sees after one command."""
    success: bool
    message: str
    command_type: CommandType
    git_command: str | None = None


@dataclass
class GameState:
    """Read-only summary for the UI."""
    is_active: bool
    current_room_id: str | None
    current_room_name: str | None
    is_completed: bool
    player_name: str | None
    completed_rooms_count: int
    total_rooms_count: int


class GameEngine:
    """
    Command dispatcher for one game and one working directory.

    Usage:
        engine = GameEngine(GitInspector())
        engine.start_game(game, workspace)
        engine.set_save_handler(manager.save_progress)
        result = engine.process_command("git init")
    """

    def __init__(
        self,
        inspector: RepoInspector,
        registry: CommandRegistry | None = None,
        event_bus: EventBus | None = None,
    ):
        if inspector is None:
            raise TypeError("inspector is required")
        self.inspector = inspector
        self.registry = registry or get_registry()
        self.event_bus = event_bus or get_event_bus()

        self.game: Game | None = None
        self.working_dir: Path | None = None
        self._save_handler: SaveHandler | None = None

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    def start_game(self, game: Game, working_dir: Path | str) -> None:
        """
        Attach a game and its working directory.

        Raises:
            TypeError: game is None
            ValueError: working_dir is blank
            DirectoryMissingError: working_dir does not exist
        """
        if game is None:
            raise TypeError("game is required")
        if not working_dir or not str(working_dir).strip():
            raise ValueError("Working directory cannot be empty")

        directory = Path(working_dir)
        if not directory.is_dir():
            raise DirectoryMissingError(directory)

        self.game = game
        self.working_dir = directory
        logger.info(f"Engine attached to {game!r} in {directory}")

    def set_save_handler(self, handler: SaveHandler | None) -> None:
        self._save_handler = handler

    def setup_current_room(self) -> None:
        """
        Prepare the working directory for the current room's challenge.

        Skipped when the challenge is already completed. Setup errors
        propagate to the caller.
        """
        if self.game is None or self.working_dir is None:
            return
        challenge = self.game.current_room.challenge
        if challenge is not None and not self.game.current_challenge_completed:
            challenge.setup(self.working_dir)

    def get_current_state(self) -> GameState:
        game = self.game
        if game is None:
            return GameState(
                is_active=False,
                current_room_id=None,
                current_room_name=None,
                is_completed=False,
                player_name=None,
                completed_rooms_count=0,
                total_rooms_count=0,
            )

        return GameState(
            is_active=game.is_active,
            current_room_id=game.current_room.id,
            current_room_name=game.current_room.name,
            is_completed=not game.is_active,
            player_name=game.player.name,
            completed_rooms_count=len(game.player.completed_rooms),
            total_rooms_count=len(game.rooms),
        )

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def process_command(self, text: str | None) -> CommandResult:
        if self.game is None or self.working_dir is None:
            return CommandResult(False, "No active game. Please start a game first.", CommandType.UNKNOWN)

        if not text or not text.strip():
            return CommandResult(False, "Command cannot be empty.", CommandType.UNKNOWN)

        command = text.strip()
        keyword, _, rest = command.partition(" ")
        keyword = keyword.lower()
        rest = rest.strip()

        try:
            return self._dispatch(command, keyword, rest)
        except Exception as e:
            # Nothing escapes to the prompt loop
            logger.exception(f"Unhandled error processing '{command}'")
            return CommandResult(False, f"Something went wrong: {e}", CommandType.UNKNOWN)

    def _dispatch(self, command: str, keyword: str, rest: str) -> CommandResult:
        if not rest:
            if keyword in ("help", "?"):
                return self._handle_help()
            elif keyword == "status":
                return self._handle_status()
            elif keyword in ("look", "examine"):
                return self._handle_look()
            elif keyword in ("forward", "back"):
                return self._handle_movement(keyword)
            elif keyword == "hint":
                return self._handle_hint()
            elif keyword == "save":
                return self._handle_save()
            elif keyword == "exit":
                return CommandResult(True, EXIT_SENTINEL, CommandType.EXIT)

        if keyword == "go":
            return self._handle_movement(rest.lower())
        elif keyword == "answer":
            return self._handle_answer(rest)
        elif keyword == "git" and rest:
            return self._handle_git(rest)

        return CommandResult(
            False,
            f"Unknown command: {command}. Type 'help' for available commands.",
            CommandType.UNKNOWN,
        )

    # -------------------------------------------------------------------------
    # Read-only commands
    # -------------------------------------------------------------------------

    def _handle_help(self) -> CommandResult:
        return CommandResult(True, self.registry.help_text(), CommandType.HELP)

    def _handle_status(self) -> CommandResult:
        game = self.game
        room = game.current_room
        player = game.player

        lines = [
            "Game Status:",
            "------------",
            f"Player: {player.name}",
            f"Current Room: {room.name}",
            f"Rooms Completed: {len(player.completed_rooms)}/{len(game.rooms)}",
            f"Challenges Completed: {len(player.completed_challenges)}",
            f"Moves: {player.move_count}",
            "",
            "Room Info:",
            room.description,
            "",
        ]
        if room.challenge is not None:
            done = player.has_completed_challenge(room.challenge.id)
            lines.append(f"Challenge: {'✓ Completed' if done else '○ In Progress'}")
        if room.exits:
            lines.append(f"\nAvailable Exits: {room.exit_list}")

        return CommandResult(True, "\n".join(lines), CommandType.STATUS)

    def _handle_look(self) -> CommandResult:
        room = self.game.current_room
        text = f"{room.name}\n{'=' * len(room.name)}\n\n{room.narrative}\n"

        if room.challenge is not None:
            done = self.game.player.has_completed_challenge(room.challenge.id)
            text += f"\nChallenge: {room.challenge.description}"
            text += f"\nStatus: {'✓ Completed' if done else '○ Not completed'}"
        if room.exits:
            text += f"\n\nExits: {room.exit_list}"

        return CommandResult(True, text, CommandType.LOOK)

    def _handle_hint(self) -> CommandResult:
        challenge = self.game.current_room.challenge
        if challenge is None:
            return CommandResult(False, "There is no active challenge in this room.", CommandType.HINT)
        if self.game.player.has_completed_challenge(challenge.id):
            return CommandResult(False, "You've already completed this challenge!", CommandType.HINT)
        return CommandResult(True, f"Hint: {default_hint(challenge)}", CommandType.HINT)

    # -------------------------------------------------------------------------
    # Movement
    # -------------------------------------------------------------------------

    def _handle_movement(self, direction: str) -> CommandResult:
        game = self.game

        if not game.current_challenge_completed:
            return CommandResult(
                False,
                "You must complete the current room's challenge before you can leave!",
                CommandType.MOVEMENT,
            )

        target = game.get_room_id_in_direction(direction) if direction else None
        if target is None:
            return CommandResult(
                False,
                f"You cannot go '{direction}' from here. Available exits: {game.current_room.exit_list}",
                CommandType.MOVEMENT,
            )

        if not game.move_to_room(target):
            return CommandResult(False, "Failed to move to the next room.", CommandType.MOVEMENT)

        room = game.current_room
        self.event_bus.emit(EventType.ROOM_ENTERED, player=game.player.name, room_id=room.id)

        message = f"You move {direction}..."

        try:
            self.setup_current_room()
        except (DirectoryMissingError, GitError, OSError) as e:
            logger.error(f"Setup of {room.id} failed: {e}")
            return CommandResult(
                False,
                f"{message}\n\nThe room could not be prepared: {e}",
                CommandType.MOVEMENT,
            )

        if room.is_end_room:
            message += "\n\n*** CONGRATULATIONS! You've completed the game! ***"
            self.event_bus.emit(
                EventType.GAME_COMPLETED,
                player=game.player.name,
                moves=game.player.move_count,
            )

        return CommandResult(True, message, CommandType.MOVEMENT)

    # -------------------------------------------------------------------------
    # Challenge progress
    # -------------------------------------------------------------------------

    def _exits_suffix(self) -> str:
        room = self.game.current_room
        return f"\nYou can now exit: {room.exit_list}" if room.exits else ""

    def _mark_completed(self) -> None:
        game = self.game
        challenge = game.current_room.challenge
        game.complete_current_challenge()
        logger.info(f"{game.player.name} completed {challenge.id}")
        self.event_bus.emit(
            EventType.CHALLENGE_COMPLETED,
            player=game.player.name,
            room_id=game.current_room.id,
            challenge_id=challenge.id,
        )

    def _handle_git(self, args: str) -> CommandResult:
        try:
            result = self.inspector.execute(args, self.working_dir)
            success = result.success
            output = result.output if result.output.strip() else result.error
        except Exception as e:
            # The room is still re-checked below
            logger.warning(f"git {args} failed: {e}")
            success = False
            output = f"Git command failed: {e}"

        self.event_bus.emit(EventType.GIT_EXECUTED, player=self.game.player.name, command=args, success=success)

        challenge = self.game.current_room.challenge
        if challenge is not None and not self.game.current_challenge_completed:
            validation = challenge.validate(self.working_dir)
            if validation.is_successful:
                self._mark_completed()
                output += f"\n\n✓ Challenge completed! {validation.message}"
                output += self._exits_suffix()

        return CommandResult(success, output, CommandType.GIT, git_command=args)

    def _handle_answer(self, text: str) -> CommandResult:
        challenge = self.game.current_room.challenge
        if challenge is None or challenge.challenge_type != ChallengeType.QUIZ:
            return CommandResult(False, "This command only works in quiz challenges.", CommandType.ANSWER)

        quiz: QuizChallenge = challenge
        if self.game.current_challenge_completed:
            return CommandResult(False, "You've already completed this challenge!", CommandType.ANSWER)

        try:
            number = int(text)
        except ValueError:
            number = 0
        if number < 1:
            return CommandResult(
                False,
                "Please provide a valid answer number (e.g., 'answer 1' for option 1).",
                CommandType.ANSWER,
            )

        try:
            quiz.submit_answer(number - 1)
        except AnswerOutOfRangeError:
            return CommandResult(
                False,
                f"Invalid answer. Please choose a number between 1 and {len(quiz.options)}.",
                CommandType.ANSWER,
            )

        validation = quiz.validate(self.working_dir)
        if not validation.is_successful:
            return CommandResult(False, validation.message, CommandType.ANSWER)

        self._mark_completed()
        message = f"{validation.message}\n\nChallenge completed!" + self._exits_suffix()
        return CommandResult(True, message, CommandType.ANSWER)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _handle_save(self) -> CommandResult:
        if self._save_handler is None:
            return CommandResult(False, "Save functionality is not available.", CommandType.SAVE)

        try:
            result = self._save_handler(self.game)
        except Exception as e:
            logger.error(f"Save handler raised: {e}")
            return CommandResult(False, f"Failed to save game: {e}", CommandType.SAVE)

        return CommandResult(result.success, result.message, CommandType.SAVE)
