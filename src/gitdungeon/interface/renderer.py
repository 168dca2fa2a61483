"""
Display and rendering helpers for the git dungeon console.

Handles theming, banners, room panels and command results.
"""

import random
import time

from prompt_toolkit.styles import Style as PTStyle
from rich.box import ROUNDED
from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from ..challenges import ChallengeType
from ..state.game import Game
from ..state.schema import Room
from ..systems.engine import CommandResult, CommandType, GameState


# Shared console instance
console = Console()

# -----------------------------------------------------------------------------
# Theme: torchlight on old stone
# -----------------------------------------------------------------------------

THEME = {
    "primary": "dark_orange3",      # torchlight
    "secondary": "grey70",          # stone
    "success": "green3",            # challenge passed
    "warning": "yellow3",           # hints, blocked exits
    "danger": "red3",               # errors
    "accent": "cyan",               # git commands
    "dim": "dim",                   # background text
}

# Prompt toolkit style to match theme
pt_style = PTStyle.from_dict({
    "prompt": "#d78700 bold",
    "completion-menu.completion": "bg:#3a2a1a #c0c0c0",
    "completion-menu.completion.current": "bg:#875f00 #ffffff bold",
    "completion-menu.meta.completion": "bg:#3a2a1a #808080",
    "completion-menu.meta.completion.current": "bg:#875f00 #c0c0c0",
})


# -----------------------------------------------------------------------------
# Banner
# -----------------------------------------------------------------------------

def show_banner(animate: bool = True):
    """Display the title banner, optionally flickering in like a torch."""
    banner_lines = [
        "   ___ _ _     ___",
        "  / __(_) |_  |   \\ _  _ _ _  __ _ ___ ___ _ _",
        " | (_ | |  _| | |) | || | ' \\/ _` / -_) _ \\ ' \\",
        "  \\___|_|\\__| |___/ \\_,_|_||_\\__, \\___\\___/_||_|",
        "                             |___/",
    ]
    flicker_chars = "░▒▓·"

    def render_frame(reveal: float) -> Text:
        text = Text()
        for line in banner_lines:
            chars = [
                c if c == " " or random.random() < reveal else random.choice(flicker_chars)
                for c in line
            ]
            text.append("".join(chars), style=f"bold {THEME['primary']}")
            text.append("\n")
        text.append("  Escape the dungeon one commit at a time.\n", style=THEME["secondary"])
        return text

    if not animate:
        console.print(render_frame(1.0))
        return

    frames = 15
    duration = 1.0  # seconds
    with Live(render_frame(0.0), console=console, refresh_per_second=20) as live:
        for i in range(frames + 1):
            progress = i / frames
            live.update(render_frame(1 - (1 - progress) ** 2))
            time.sleep(duration / frames)
        live.update(render_frame(1.0))


def show_git_missing():
    """Installation help when git is not on PATH."""
    console.print(f"[bold {THEME['danger']}]Error: Git is not installed or not found in PATH[/]")
    console.print()
    console.print(f"[{THEME['warning']}]git dungeon requires Git to be installed to run.[/]")
    console.print()
    console.print("[blue]Installation instructions:[/]")
    console.print("  • [bold]macOS:[/] brew install git")
    console.print("  • [bold]Ubuntu/Debian:[/] sudo apt install git")
    console.print("  • [bold]Fedora:[/] sudo dnf install git")
    console.print("  • [bold]Windows:[/] Download from https://git-scm.com/download/win")
    console.print()
    console.print(f"[{THEME['dim']}]After installing, restart your terminal and try again.[/]")


# -----------------------------------------------------------------------------
# Rooms
# -----------------------------------------------------------------------------

def room_panel(room: Room, completed: bool) -> Panel:
    """Room narrative plus its challenge, as one panel."""
    body = Text.from_markup(room.narrative)

    challenge = room.challenge
    if challenge is not None:
        body.append("\n\n")
        mark = "✓" if completed else "○"
        style = THEME["success"] if completed else THEME["warning"]
        body.append(f"{mark} Challenge: ", style=f"bold {style}")
        body.append(challenge.description)

        if challenge.challenge_type == ChallengeType.QUIZ:
            body.append("\n")
            for number, option in enumerate(challenge.options, start=1):
                body.append(f"\n  {number}. ", style=THEME["accent"])
                body.append(option)

    if room.exits:
        body.append("\n\nExits: ", style=THEME["dim"])
        body.append(room.exit_list, style=THEME["dim"])

    return Panel(
        body,
        title=f"[bold {THEME['primary']}]{escape(room.name)}[/]",
        subtitle=f"[{THEME['dim']}]{escape(room.description)}[/]",
        box=ROUNDED,
        border_style=THEME["primary"],
        padding=(1, 2),
    )


def show_room(game: Game):
    room = game.current_room
    console.print(room_panel(room, game.current_challenge_completed))


# -----------------------------------------------------------------------------
# Command results
# -----------------------------------------------------------------------------

def show_result(result: CommandResult):
    """Render one engine result. Tool output is printed verbatim, never as markup."""
    message = escape(result.message)

    kind = result.command_type
    if kind == CommandType.GIT:
        style = THEME["secondary"] if result.success else THEME["danger"]
        console.print(f"[{style}]{message}[/]")
    elif kind in (CommandType.HELP, CommandType.STATUS):
        console.print(Panel(message, border_style=THEME["secondary"], box=ROUNDED))
    elif kind == CommandType.LOOK:
        console.print(Panel(Text.from_markup(result.message), border_style=THEME["primary"], box=ROUNDED))
    elif kind == CommandType.HINT:
        console.print(f"[{THEME['warning']}]{message}[/]")
    else:
        style = THEME["success"] if result.success else THEME["danger"]
        console.print(f"[{style}]{message}[/]")


def show_error(message: str):
    console.print(Panel(escape(message), title="Error", border_style=THEME["danger"], box=ROUNDED))


def show_completion(game: Game, tally=None):
    """Final summary table once the exit gate is reached. `tally` is a cli.SessionTally."""
    player = game.player
    table = Table(box=ROUNDED, border_style=THEME["success"], show_header=False)
    table.add_column("Stat", style=THEME["secondary"])
    table.add_column("Value", style="bold")
    table.add_row("Adventurer", player.name)
    table.add_row("Moves", str(player.move_count))
    table.add_row("Rooms visited", f"{len(player.completed_rooms)}/{len(game.rooms)}")
    table.add_row("Challenges completed", str(len(player.completed_challenges)))
    if game.completed_at is not None:
        elapsed = game.completed_at - player.game_started
        minutes, seconds = divmod(int(elapsed.total_seconds()), 60)
        table.add_row("Time", f"{minutes}m {seconds:02d}s")
    if tally is not None:
        table.add_row("Git commands", f"{tally.git_commands} ({tally.failed_git_commands} failed)")
        table.add_row("Cleared this session", str(len(tally.challenges)))

    console.print(Rule(f"[bold {THEME['success']}]You escaped the dungeon![/]"))
    console.print(table)


def prompt_message(state: GameState) -> str:
    """Prompt text for prompt_toolkit, e.g. 'Staging Area (2/15) > '."""
    name = state.current_room_name or "?"
    return f"{name} ({state.completed_rooms_count}/{state.total_rooms_count}) > "
