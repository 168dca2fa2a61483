"""
Command Registry for git dungeon.

Provides a single source of truth for the in-game command vocabulary.
The engine renders its help text from it and the prompt completes
from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CommandCategory(str, Enum):
    """Command categories for organized display."""
    GAME = "Game"
    MOVEMENT = "Movement"
    QUIZ = "Quiz"
    GIT = "Git"
    SYSTEM = "System"


# -----------------------------------------------------------------------------
# Command Definition
# -----------------------------------------------------------------------------

@dataclass
class Command:
    """
    A single command definition.

    Attributes:
        name: The keyword the player types (e.g., "look")
        description: Short description for help and completion
        category: Category for grouping in help/completion
        usage: How to type it, when it takes arguments (e.g., "go <direction>")
        aliases: Alternative keywords for the command
        hidden: If True, don't show in help or completion
    """
    name: str
    description: str
    category: CommandCategory
    usage: str = ""
    aliases: list[str] = field(default_factory=list)
    hidden: bool = False

    @property
    def display(self) -> str:
        """Usage column for help: explicit usage, else name/alias/..."""
        if self.usage:
            return self.usage
        return "/".join([self.name, *(a for a in self.aliases if a.isalpha())])


# -----------------------------------------------------------------------------
# Fuzzy Matching
# -----------------------------------------------------------------------------

def fuzzy_match(pattern: str, text: str) -> tuple[bool, int]:
    """
    Check if pattern fuzzy-matches text.
    Returns (matches, score) where score is higher for better matches.
    """
    pattern = pattern.lower()
    text = text.lower()

    # Exact prefix match gets highest score
    if text.startswith(pattern):
        return True, 1000 - len(text)

    # Fuzzy match: all pattern chars must appear in order
    pattern_idx = 0
    score = 0
    consecutive = 0

    for i, char in enumerate(text):
        if pattern_idx < len(pattern) and char == pattern[pattern_idx]:
            pattern_idx += 1
            consecutive += 1
            score += consecutive * 10
            # Bonus for matching at word boundaries
            if i == 0 or text[i - 1] in " _-":
                score += 50
        else:
            consecutive = 0

    if pattern_idx == len(pattern):
        return True, score
    return False, 0


# -----------------------------------------------------------------------------
# Command Registry
# -----------------------------------------------------------------------------

class CommandRegistry:
    """Central registry for all in-game commands."""

    def __init__(self):
        self._commands: dict[str, Command] = {}

    def register(self, command: Command) -> None:
        """Register a command and its aliases."""
        self._commands[command.name] = command
        for alias in command.aliases:
            self._commands[alias] = command

    def get(self, name: str) -> Command | None:
        """Get a command by name or alias (case-insensitive)."""
        return self._commands.get(name.lower())

    def all_commands(self) -> list[Command]:
        """Get all unique commands (excludes aliases)."""
        seen = set()
        result = []
        for cmd in self._commands.values():
            if cmd.name not in seen:
                seen.add(cmd.name)
                result.append(cmd)
        return result

    def by_category(self) -> dict[CommandCategory, list[Command]]:
        """Visible commands grouped by category, in registration order."""
        result: dict[CommandCategory, list[Command]] = {cat: [] for cat in CommandCategory}
        for cmd in self.all_commands():
            if not cmd.hidden:
                result[cmd.category].append(cmd)
        return result

    def search(self, query: str) -> list[tuple[Command, int]]:
        """
        Search commands with fuzzy matching.

        Returns list of (command, score) tuples, sorted by score descending.
        """
        visible = [cmd for cmd in self.all_commands() if not cmd.hidden]
        if not query:
            return [(cmd, 0) for cmd in visible]

        results: list[tuple[Command, int]] = []
        for cmd in visible:
            is_match, score = fuzzy_match(query, cmd.name)
            if not is_match:
                for alias in cmd.aliases:
                    is_match, score = fuzzy_match(query, alias)
                    if is_match:
                        break
            if is_match:
                results.append((cmd, score))

        category_order = list(CommandCategory)
        results.sort(key=lambda x: (
            -x[1],
            category_order.index(x[0].category),
            x[0].name,
        ))
        return results

    def autocorrect(self, keyword: str) -> tuple[str, str | None]:
        """
        Attempt to autocorrect a mistyped keyword.

        Returns (corrected, suggestion message) or (original, None).
        """
        if keyword.lower() in self._commands:
            return keyword, None

        results = self.search(keyword)
        if results and results[0][1] > 500:  # High confidence threshold
            corrected = results[0][0].name
            return corrected, f"Did you mean '{corrected}'?"

        return keyword, None

    def help_text(self) -> str:
        """Plain-text command reference, grouped by category."""
        lines = ["Available Commands:", ""]
        for category, commands in self.by_category().items():
            if not commands:
                continue
            lines.append(f"{category.value} Commands:")
            for cmd in commands:
                lines.append(f"  {cmd.display:<18}- {cmd.description}")
            lines.append("")

        lines.extend([
            "Tips:",
            "  - Read the room narrative carefully for clues",
            "  - Use 'git status' to check your repository state",
            "  - Complete the challenge to unlock exits",
        ])
        return "\n".join(lines)


# -----------------------------------------------------------------------------
# Game vocabulary
# -----------------------------------------------------------------------------

DEFAULT_COMMANDS = [
    Command("help", "Show this help message", CommandCategory.GAME, aliases=["?"]),
    Command("status", "Show game progress and current room info", CommandCategory.GAME),
    Command("look", "Examine the current room", CommandCategory.GAME, aliases=["examine"]),
    Command("hint", "Get a hint for the current challenge", CommandCategory.GAME),
    Command("go", "Move in a direction (e.g., 'go forward')", CommandCategory.MOVEMENT,
            usage="go <direction>"),
    Command("forward", "Move forward", CommandCategory.MOVEMENT),
    Command("back", "Move back", CommandCategory.MOVEMENT),
    Command("answer", "Answer a quiz question (e.g., 'answer 1')", CommandCategory.QUIZ,
            usage="answer <number>"),
    Command("git", "Execute any git command (e.g., 'git init', 'git status')", CommandCategory.GIT,
            usage="git <command>"),
    Command("save", "Save your game progress", CommandCategory.SYSTEM),
    Command("exit", "Exit the game (with option to save)", CommandCategory.SYSTEM),
]


def build_default_registry() -> CommandRegistry:
    registry = CommandRegistry()
    for command in DEFAULT_COMMANDS:
        registry.register(command)
    return registry


# -----------------------------------------------------------------------------
# Global Registry Instance
# -----------------------------------------------------------------------------

_registry: CommandRegistry | None = None


def get_registry() -> CommandRegistry:
    """Get the global command registry (lazy initialization)."""
    global _registry
    if _registry is None:
        _registry = build_default_registry()
    return _registry


def create_completer(registry: CommandRegistry | None = None):
    """
    Create a prompt-toolkit Completer that uses the registry.

    Completes the first word only; after `git ` it offers common
    subcommands.
    """
    from prompt_toolkit.completion import Completer, Completion

    git_subcommands = [
        "add", "branch", "checkout", "commit", "diff", "init", "log",
        "cherry-pick", "merge", "rebase", "restore", "stash", "status",
        "switch", "tag",
    ]

    class RegistryCompleter(Completer):
        def __init__(self):
            self.registry = registry or get_registry()

        def get_completions(self, document, complete_event):
            text = document.text_before_cursor.lstrip()
            words = text.split(" ")

            if len(words) == 1:
                current_category = None
                for cmd, _ in self.registry.search(words[0]):
                    if cmd.category != current_category:
                        display = f"[{cmd.category.value}] {cmd.name}"
                        current_category = cmd.category
                    else:
                        display = f"        {cmd.name}"
                    yield Completion(
                        cmd.name,
                        start_position=-len(words[0]),
                        display=display,
                        display_meta=cmd.description,
                    )
                return

            if len(words) == 2 and words[0].lower() == "git":
                for sub in git_subcommands:
                    if sub.startswith(words[1]):
                        yield Completion(sub, start_position=-len(words[1]))

    return RegistryCompleter()
