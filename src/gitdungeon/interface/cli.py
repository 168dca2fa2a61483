"""
Command-line interface for git dungeon.

Main entry point and game loop.
"""

import argparse
import logging
import sys
from pathlib import Path

from prompt_toolkit import prompt as pt_prompt
from rich.markup import escape
from rich.prompt import Confirm, Prompt

from ..git import GitError, GitInspector, WorkspaceManager
from ..rooms import RoomRepository
from ..state import (
    DEFAULT_PLAYER_NAME,
    EventBus,
    EventType,
    Game,
    GameEvent,
    GameManager,
    JsonProgressStore,
    get_event_bus,
)
from ..state.store import DEFAULT_SAVE_DIR
from ..systems.engine import EXIT_SENTINEL, CommandType, GameEngine
from ..systems.command_registry import create_completer, get_registry
from .config import load_config, set_git_timeout, set_player_name
from .renderer import (
    THEME,
    console,
    prompt_message,
    pt_style,
    show_banner,
    show_completion,
    show_error,
    show_git_missing,
    show_result,
    show_room,
)

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="git dungeon - learn git by escaping a dungeon")
    parser.add_argument(
        "--name", "-n",
        help="Player name (skips the name prompt)",
    )
    parser.add_argument(
        "--new",
        action="store_true",
        help="Start a new game even if a save exists",
    )
    parser.add_argument(
        "--save-dir",
        default=DEFAULT_SAVE_DIR,
        help=f"Directory for the save slot, config and log (default: {DEFAULT_SAVE_DIR})",
    )
    parser.add_argument(
        "--no-animate", "-q",
        action="store_true",
        help="Skip banner animation",
    )
    parser.add_argument(
        "--git-timeout",
        type=float,
        metavar="SECONDS",
        help="Abandon git commands after this many seconds; 0 waits forever (remembered)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log at DEBUG level",
    )
    return parser.parse_args(argv)


def configure_logging(save_dir: Path, level_name: str) -> None:
    """Log to a file so the console stays clean."""
    save_dir.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        filename=save_dir / "gitdungeon.log",
    )


class SessionTally:
    """
    Keeps score of the current sitting from the event bus.

    Counts git passthrough commands and the challenges cleared since
    launch; shown in the completion summary.
    """

    def __init__(self, bus: EventBus):
        self.git_commands = 0
        self.failed_git_commands = 0
        self.challenges: list[str] = []
        bus.on(EventType.GIT_EXECUTED, self._on_git_executed)
        bus.on(EventType.CHALLENGE_COMPLETED, self._on_challenge_completed)
        bus.on(EventType.GAME_COMPLETED, self._on_game_completed)

    def _on_git_executed(self, event: GameEvent) -> None:
        self.git_commands += 1
        if not event.data.get("success"):
            self.failed_git_commands += 1

    def _on_challenge_completed(self, event: GameEvent) -> None:
        self.challenges.append(event.data["challenge_id"])
        logger.info(f"{event.player} cleared {event.data['challenge_id']} in {event.data.get('room_id')}")

    def _on_game_completed(self, event: GameEvent) -> None:
        logger.info(
            f"{event.player} escaped after {event.data.get('moves')} moves, "
            f"{self.git_commands} git commands and {len(self.challenges)} challenges this session"
        )


# -----------------------------------------------------------------------------
# Session setup
# -----------------------------------------------------------------------------

def choose_game(manager: GameManager, args: argparse.Namespace, default_name: str | None) -> Game | None:
    """Load the saved game if the player wants it, otherwise start fresh."""
    if manager.has_saved_progress() and not args.new:
        if Confirm.ask("A saved game was found. Do you want to load it?", default=True, console=console):
            loaded = manager.load_progress()
            if loaded.success:
                console.print(f"[{THEME['success']}]{escape(loaded.message)}[/]\n")
                return loaded.game
            show_error(f"Failed to load saved game: {loaded.message}")
            console.print(f"[{THEME['warning']}]Starting a new game instead...[/]\n")
        elif Confirm.ask("Do you want to delete the existing saved game?", default=False, console=console):
            manager.delete_progress()
            console.print(f"[{THEME['warning']}]Saved game deleted.[/]\n")

    name = args.name
    if not name:
        name = Prompt.ask(
            f"Enter your name (or press Enter for '{default_name or DEFAULT_PLAYER_NAME}')",
            default=default_name or "",
            show_default=False,
            console=console,
        )

    started = manager.start_game(name)
    if not started.success:
        show_error(started.message)
        return None

    console.print(f"[{THEME['success']}]{escape(started.message)}[/]\n")
    return started.game


def run_loop(engine: GameEngine, manager: GameManager, tally: SessionTally | None = None) -> None:
    """Read commands until the game ends or the player leaves."""
    completer = create_completer(get_registry())
    console.print(f"[{THEME['dim']}]Type 'help' for commands.[/]\n")

    while engine.game is not None and engine.game.is_active:
        try:
            user_input = pt_prompt(
                prompt_message(engine.get_current_state()),
                completer=completer,
                style=pt_style,
                complete_while_typing=True,
            ).strip()

            if not user_input:
                continue

            result = engine.process_command(user_input)

            if result.command_type == CommandType.EXIT and result.message == EXIT_SENTINEL:
                if Confirm.ask("Save your progress before leaving?", default=True, console=console):
                    show_result(engine.process_command("save"))
                break

            if result.command_type == CommandType.UNKNOWN:
                keyword = user_input.split(" ", 1)[0]
                _, suggestion = get_registry().autocorrect(keyword)
                show_result(result)
                if suggestion:
                    console.print(f"[{THEME['dim']}]{suggestion}[/]")
                continue

            show_result(result)
            if result.command_type == CommandType.MOVEMENT and result.success:
                console.print()
                show_room(engine.game)

        except KeyboardInterrupt:
            console.print(f"\n[{THEME['dim']}]Use 'exit' to leave[/]")
        except EOFError:
            break

    if engine.game is not None and not engine.game.is_active:
        show_completion(engine.game, tally)
        # A finished run should not be offered for loading again
        manager.delete_progress()


# -----------------------------------------------------------------------------
# Main
# -----------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    save_dir = Path(args.save_dir).expanduser()

    config = load_config(save_dir)
    configure_logging(save_dir, "DEBUG" if args.debug else config.get("log_level", "INFO"))

    if not GitInspector.is_installed():
        show_git_missing()
        return 1

    animate_banner = config.get("animate_banner", True) and not args.no_animate
    show_banner(animate=animate_banner)

    git_timeout = config.get("git_timeout")
    if args.git_timeout is not None:
        git_timeout = args.git_timeout if args.git_timeout > 0 else None
        set_git_timeout(git_timeout, save_dir)

    bus = get_event_bus()
    tally = SessionTally(bus)

    inspector = GitInspector(timeout=git_timeout)
    rooms = RoomRepository(inspector)
    manager = GameManager(JsonProgressStore(save_dir), rooms, event_bus=bus)

    game = choose_game(manager, args, config.get("player_name"))
    if game is None:
        return 1
    if game.player.name != config.get("player_name"):
        set_player_name(game.player.name, save_dir)

    with WorkspaceManager(config.get("workspace_root")) as workspaces:
        workspace = workspaces.create_directory("game")
        logger.info(f"Playing in {workspace}")

        engine = GameEngine(inspector, registry=get_registry(), event_bus=bus)
        engine.start_game(game, workspace)
        engine.set_save_handler(manager.save_progress)

        try:
            engine.setup_current_room()
        except (GitError, OSError) as e:
            show_error(f"Could not prepare the room: {e}")
            return 1

        console.print(f"[{THEME['dim']}]Your working directory: {escape(str(workspace))}[/]\n")
        show_room(game)
        run_loop(engine, manager, tally)

    console.print(f"[{THEME['dim']}]Farewell, {escape(game.player.name)}.[/]")
    return 0


if __name__ == "__main__":
    sys.exit(main())
