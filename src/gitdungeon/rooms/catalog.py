"""
Room content.

Each builder returns one Room with its challenge wired to the given
inspector. The map is a single corridor: every room's only exit is
`forward`, ending at the exit gate.

Narratives use rich console markup.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable

from ..challenges import ChallengeResult, QuizChallenge, RepositoryChallenge, ScenarioChallenge
from ..git.inspector import RepoInspector
from ..state.schema import Room

logger = logging.getLogger(__name__)

PLAYER_EMAIL = "adventurer@gitdungeon.game"
PLAYER_NAME = "Adventurer"

COMMAND_GUIDE = "\n\n[yellow]═══ Command Guide ═══[/]"


# -----------------------------------------------------------------------------
# Setup helpers
# -----------------------------------------------------------------------------

def _run(inspector: RepoInspector, directory: Path, *commands: str) -> None:
    """Run setup commands in order. Failures are expected for some (e.g. a conflicting merge)."""
    for command in commands:
        result = inspector.execute(command, directory)
        if not result.success:
            logger.debug(f"Setup command 'git {command}' exited {result.exit_code}: {result.error}")


def _ensure_repository(directory: Path, inspector: RepoInspector) -> None:
    """Initialize (if needed) with a local identity so commits never prompt."""
    _run(
        inspector,
        directory,
        "init",
        f"config user.email {PLAYER_EMAIL}",
        f"config user.name {PLAYER_NAME}",
        "config commit.gpgsign false",
    )


def _fresh_repository(directory: Path, inspector: RepoInspector) -> None:
    """Empty the workspace and start a new repository on `main`."""
    for child in directory.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
    _ensure_repository(directory, inspector)
    _run(inspector, directory, "symbolic-ref HEAD refs/heads/main")


def _commit_file(inspector: RepoInspector, directory: Path, name: str, content: str, message: str) -> None:
    (directory / name).write_text(content)
    _run(inspector, directory, f"add {name}", f'commit -m "{message}"')


# -----------------------------------------------------------------------------
# Rooms
# -----------------------------------------------------------------------------

def initialization_chamber(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="init-chamber-challenge",
        description="Initialize a git repository by running 'git init'",
        inspector=inspector,
        require_git_init=True,
    )
    return Room(
        id="room-1",
        name="The Initialization Chamber",
        description="A barren chamber with ancient walls",
        narrative=(
            "You've entered a barren chamber. The walls are covered in ancient runes that seem to pulse "
            "with a faint light. In the center of the room, you see an empty pedestal with an inscription: "
            "'To proceed, you must create the foundation - initialize the repository of knowledge.'"
            "\n\nTo unlock the door forward, you must run: [cyan]git init[/]"
            + COMMAND_GUIDE +
            "\n[cyan]git init[/] - Creates a new git repository in the current directory"
            "\n  • Creates a hidden .git folder that stores all version history"
            "\n  • This is always the first command when starting a new project"
            "\n  • Only needs to be run once per project"
        ),
        challenge=challenge,
        exits={"forward": "room-2"},
        is_start_room=True,
    )


def staging_area(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="staging-area-challenge",
        description="Stage the README.md file and commit it",
        inspector=inspector,
        require_git_init=True,
        require_clean_status=True,
        required_commit_count=1,
        required_files=["README.md"],
        setup_files=["README.md"],
        custom_setup=_ensure_repository,
    )
    return Room(
        id="room-2",
        name="The Staging Area",
        description="A mystical chamber with a floating scroll",
        narrative=(
            "You enter a chamber bathed in ethereal light. A scroll materializes before you, labeled "
            "'README.md'. The door behind you seals shut with a resonant boom. An inscription appears on "
            "the wall: 'To escape, you must preserve this knowledge - stage the scroll and seal it with a commit.'"
            "\n\nThe scroll (README.md) has appeared in your working directory."
            + COMMAND_GUIDE +
            "\n[cyan]git add <file>[/] - Stages a file, preparing it for commit"
            "\n  • Tells git 'I want to save this file in my next snapshot'"
            "\n  • Files must be staged before they can be committed"
            "\n\n[cyan]git commit -m \"message\"[/] - Creates a permanent snapshot of all staged changes"
            "\n  • The message describes what changed and why"
            "\n  • Creates a 'save point' you can return to later"
            "\n\nTo complete this challenge:"
            "\n  1. Stage the file: [cyan]git add README.md[/]"
            "\n  2. Commit the changes: [cyan]git commit -m \"Seal the ancient scroll\"[/]"
        ),
        challenge=challenge,
        exits={"forward": "room-3"},
    )


def _history_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(inspector, directory, "scroll1.txt", "The First Chronicle", "First scroll discovered")
    _commit_file(inspector, directory, "scroll2.txt", "The Second Chronicle", "Second scroll uncovered")
    _commit_file(inspector, directory, "scroll3.txt", "The Third Chronicle", "Third scroll revealed")


def _history_validator(directory: Path, inspector: RepoInspector) -> ChallengeResult:
    log = inspector.get_log(directory, 10)
    if log.strip() and len(log.split("\n")) >= 3:
        return ChallengeResult.passed("You've successfully viewed the ancient chronicles!")
    return ChallengeResult.failed(
        "You haven't viewed the history yet.",
        "Try running 'git log' to see the commit history.",
    )


def history_archive(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="history-archive-challenge",
        description="View the commit history by running 'git log'",
        inspector=inspector,
        require_git_init=True,
        custom_setup=_history_setup,
        custom_validator=_history_validator,
    )
    return Room(
        id="room-3",
        name="The History Archive",
        description="An ancient library with scrolls floating in the air",
        narrative=(
            "You step into a vast circular chamber. The walls are lined with countless scrolls, each one "
            "glowing with an ethereal light. An inscription on the floor reads: 'Every action leaves a mark. "
            "Every commit tells a story. To proceed, you must witness the chronicles of this repository.'"
            "\n\nUse [cyan]git log[/] to view the commit history and understand what has transpired here."
            + COMMAND_GUIDE +
            "\n[cyan]git log[/] - Shows the history of all commits in the repository"
            "\n  • Displays commits in reverse chronological order (newest first)"
            "\n  • Shows commit hash, author, date, and message for each commit"
            "\n  • Useful flags: --oneline (compact view), --graph (visual tree)"
        ),
        challenge=challenge,
        exits={"forward": "room-4"},
    )


def _status_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(inspector, directory, "tracked.txt", "I am tracked", "Initial commit")
    (directory / "untracked.txt").write_text("I am untracked")
    (directory / "tracked.txt").write_text("I am now modified")
    (directory / "staged.txt").write_text("I am staged")
    _run(inspector, directory, "add staged.txt")


def _status_validator(directory: Path, inspector: RepoInspector) -> ChallengeResult:
    status = inspector.get_status(directory)
    if "Changes" in status or "Untracked" in status or "modified" in status:
        return ChallengeResult.passed(
            "You've successfully examined the state of the repository! Understanding git status is "
            "crucial for knowing what changes exist in your working directory and staging area."
        )
    return ChallengeResult.failed(
        "The mirrors remain clouded.",
        "Use 'git status' to see the state of files in the repository.",
    )


def status_chamber(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="status-chamber-challenge",
        description="Examine the repository state using 'git status'",
        inspector=inspector,
        require_git_init=True,
        custom_setup=_status_setup,
        custom_validator=_status_validator,
    )
    return Room(
        id="room-4",
        name="The Status Chamber",
        description="A room with three mystical mirrors",
        narrative=(
            "You enter a chamber dominated by three large mirrors. One shows files in pristine condition, "
            "another shows files in flux, and the third shows files in shadow. A plaque reads: "
            "'Understanding the state of your realm is the key to mastery. Files exist in many states: "
            "tracked, modified, staged, and untracked.'"
            + COMMAND_GUIDE +
            "\n[cyan]git status[/] - Shows the current state of your working directory and staging area"
            "\n  • Lists which files are modified, staged and untracked"
            "\n  • Shows which branch you're on"
            "\n\nRun [cyan]git status[/] to understand the current state of the repository."
        ),
        challenge=challenge,
        exits={"forward": "room-5"},
    )


def _branch_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(inspector, directory, "main.txt", "Main branch file", "Initial commit on main")


def branch_junction(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="branch-junction-challenge",
        description="Create a new branch called 'feature-branch' and switch to it",
        inspector=inspector,
        require_git_init=True,
        required_branches=["feature-branch"],
        required_current_branch="feature-branch",
        custom_setup=_branch_setup,
    )
    return Room(
        id="room-5",
        name="The Branch Junction",
        description="A corridor that splits into multiple paths",
        narrative=(
            "You arrive at a junction where the path diverges. The walls shimmer, showing visions of "
            "different timelines. A mystical voice echoes: 'One path need not be the only path. Create a "
            "branch called \"feature-branch\" AND step into that timeline.'"
            "\n\n[yellow]═══ Understanding HEAD ═══[/]"
            "\n[cyan]HEAD[/] is git's way of saying \"you are here.\""
            "\n  • Switching branches moves HEAD to the new branch"
            "\n  • [cyan]git branch[/] shows [green]*[/] next to the branch HEAD points to"
            + COMMAND_GUIDE +
            "\n[cyan]git branch <name>[/] - Creates a new branch (but doesn't switch to it)"
            "\n[cyan]git switch <name>[/] - Moves HEAD to an existing branch"
            "\n[cyan]git checkout -b <name>[/] - Creates a new branch AND moves HEAD to it"
            "\n\n[yellow]To complete this challenge:[/]"
            "\n  • Create AND switch at once: [cyan]git checkout -b feature-branch[/]"
            "\n    (or use modern syntax: [cyan]git switch -c feature-branch[/])"
        ),
        challenge=challenge,
        exits={"forward": "room-6"},
    )


SPELL_FILES = {
    "fireball.txt": "Fireball - A blazing sphere of flame",
    "icebolt.txt": "Icebolt - A freezing shard of ice",
    "lightning.txt": "Lightning - A crackling bolt of electricity",
}


def _merge_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(inspector, directory, "grimoire.txt", "Ancient Grimoire - Main Branch", "Initialize grimoire")
    _run(inspector, directory, "checkout -b my-feature")
    for name, content in SPELL_FILES.items():
        (directory / name).write_text(content)
    # Untracked files follow the player back to main
    _run(inspector, directory, "checkout main")


def _merge_validator(directory: Path, inspector: RepoInspector) -> ChallengeResult:
    branch = inspector.get_current_branch(directory)
    if branch == "my-feature":
        return ChallengeResult.failed(
            "You're on the my-feature branch. You need to switch back to main and merge.",
            "After committing your spells, use 'git checkout main' then 'git merge my-feature'",
        )
    if branch != "main":
        return ChallengeResult.failed(
            "You must be on the main branch to complete this challenge.",
            "Switch to main with 'git checkout main' or 'git switch main'",
        )

    tracked = inspector.execute("ls-files " + " ".join(SPELL_FILES), directory)
    if tracked.success and len(tracked.output.split()) == len(SPELL_FILES):
        return ChallengeResult.passed(
            "The paths have converged! You've successfully merged the three powerful spells from the "
            "feature branch into the main timeline!"
        )
    return ChallengeResult.failed(
        "The spells have not been merged into the main branch yet.",
        "Switch to my-feature, stage the spells with 'git add .', commit, switch to main, "
        "then 'git merge my-feature'",
    )


def merge_nexus(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="merge-nexus-challenge",
        description="Commit the spells on the feature branch and merge them into main",
        inspector=inspector,
        require_git_init=True,
        custom_setup=_merge_setup,
        custom_validator=_merge_validator,
    )
    return Room(
        id="room-6",
        name="The Merge Nexus",
        description="A convergence point where multiple timelines meet",
        narrative=(
            "You stand at a nexus where two glowing paths converge. The grimoire rests on the main "
            "pedestal, but a parallel timeline beckons: the 'my-feature' branch. Three spell scrolls "
            "lie unpreserved on the floor, waiting to be committed there and carried home to main."
            + COMMAND_GUIDE +
            "\n[cyan]git add .[/] - Stages ALL modified and new files in the current directory"
            "\n[cyan]git checkout <branch>[/] - Switches to a different branch"
            "\n[cyan]git merge <branch>[/] - Combines another branch into your current branch"
            "\n  • Must be on the branch you want to merge INTO (usually main)"
            "\n\n[yellow]Complete these steps:[/]"
            "\n  1. Switch to the feature branch: [cyan]git checkout my-feature[/]"
            "\n  2. Stage ALL the spell files at once: [cyan]git add .[/]"
            "\n  3. Commit the spells: [cyan]git commit -m \"Add three combat spells\"[/]"
            "\n  4. Switch back to main: [cyan]git checkout main[/]"
            "\n  5. Merge the feature branch: [cyan]git merge my-feature[/]"
        ),
        challenge=challenge,
        exits={"forward": "room-7"},
    )


SACRED_TEXT = "Sacred Text: In the beginning, there was git init..."


def _restoration_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(inspector, directory, "sacred-text.txt", SACRED_TEXT, "Preserve sacred text")
    (directory / "sacred-text.txt").write_text(
        "CORRUPTED: The text has been damaged and must be restored!"
    )


def _restoration_validator(directory: Path, inspector: RepoInspector) -> ChallengeResult:
    sacred = directory / "sacred-text.txt"
    if sacred.is_file() and "Sacred Text: In the beginning" in sacred.read_text():
        return ChallengeResult.passed(
            "The sacred text has been restored to its original form! You've learned how to discard "
            "unwanted changes and return files to their last committed state."
        )
    return ChallengeResult.failed(
        "The sacred text is still corrupted.",
        "Use 'git restore sacred-text.txt' or 'git checkout -- sacred-text.txt' to restore the file",
    )


def restoration_vault(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="restoration-vault-challenge",
        description="Restore the corrupted sacred-text.txt file to its original state",
        inspector=inspector,
        require_git_init=True,
        custom_setup=_restoration_setup,
        custom_validator=_restoration_validator,
    )
    return Room(
        id="room-7",
        name="The Restoration Vault",
        description="A vault containing a corrupted sacred text",
        narrative=(
            "You enter a solemn vault. A pedestal holds a glowing manuscript labeled 'sacred-text.txt', "
            "but the text flickers with corruption! A guardian spirit whispers: 'Fear not, for git "
            "remembers all. You can restore files to their last committed state.'"
            + COMMAND_GUIDE +
            "\n[cyan]git diff <file>[/] - Shows exactly what changed in a file"
            "\n[cyan]git restore <file>[/] - Discards uncommitted changes in a file"
            "\n  • WARNING: This permanently deletes your uncommitted changes!"
            "\n  • Older alternative: 'git checkout -- <file>'"
            "\n\n[yellow]To complete this challenge:[/]"
            "\n  1. See what changed: [cyan]git diff sacred-text.txt[/]"
            "\n  2. Restore the original: [cyan]git restore sacred-text.txt[/]"
        ),
        challenge=challenge,
        exits={"forward": "room-8"},
    )


def quiz_masters_hall(inspector: RepoInspector) -> Room:
    challenge = QuizChallenge(
        id="quiz-master-challenge",
        description="Answer the Quiz Master's question about git commands",
        question="What command stages all modified and new files in the current directory?",
        options=["git add .", "git commit -a", "git stage *", "git push --all"],
        correct_answer_index=0,
        hint="Think about the command that adds files to the staging area. The '.' means current directory.",
    )
    return Room(
        id="room-8",
        name="The Quiz Master's Hall",
        description="A grand hall where an ancient sage tests your knowledge",
        narrative=(
            "You enter a magnificent hall. At the far end, seated on a throne of crystallized commits, "
            "sits the Quiz Master. The sage speaks: 'Answer my question correctly, and I shall open the "
            "path to deeper mysteries.'"
            f"\n\nThe Quiz Master asks: {challenge.question}"
            "\n\nUse 'answer <number>' to respond (e.g., 'answer 1' for the first option)"
        ),
        challenge=challenge,
        exits={"forward": "room-9"},
    )


def _conflict_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(
        inspector, directory, "spell-book.txt",
        "Chapter 1: Fire Magic\nChapter 2: Water Magic\nChapter 3: Earth Magic",
        "Initial spell book",
    )
    _run(inspector, directory, "checkout -b arcane-updates")
    _commit_file(
        inspector, directory, "spell-book.txt",
        "Chapter 1: Advanced Fire Magic\nChapter 2: Water Magic\nChapter 3: Earth Magic",
        "Update fire magic chapter",
    )
    _run(inspector, directory, "checkout main")
    _commit_file(
        inspector, directory, "spell-book.txt",
        "Chapter 1: Elemental Fire Magic\nChapter 2: Water Magic\nChapter 3: Earth Magic",
        "Revise fire magic title",
    )
    # Fails on purpose and leaves the conflict in place
    _run(inspector, directory, "merge arcane-updates")


def _conflict_validator(directory: Path, inspector: RepoInspector) -> ChallengeResult:
    if inspector.has_conflicts(directory):
        return ChallengeResult.failed(
            "The magical energies still clash! Conflicts remain unresolved.",
            "Use 'git checkout --ours spell-book.txt' or 'git checkout --theirs spell-book.txt' to choose "
            "a version, then 'git add spell-book.txt' and 'git commit --no-edit'",
        )

    log = inspector.get_log(directory, 5)
    if "Merge" in log or "merge" in log:
        return ChallengeResult.passed(
            "The conflicting energies have been harmonized! You've successfully resolved the merge "
            "conflict and unified the timelines!"
        )
    return ChallengeResult.failed(
        "The conflict has been resolved, but you haven't completed the merge.",
        "After resolving conflicts and staging changes, complete the merge with 'git commit --no-edit'",
    )


def conflict_catacombs(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="conflict-catacombs-challenge",
        description="Resolve the merge conflict between two branches",
        inspector=inspector,
        require_git_init=True,
        custom_setup=_conflict_setup,
        custom_validator=_conflict_validator,
    )
    return Room(
        id="room-9",
        name="The Conflict Catacombs",
        description="A chamber where two magical forces collide",
        narrative=(
            "You descend into the catacombs, where the air crackles with opposing magical energies. "
            "The arcane-updates branch and the main branch both modified the same spell book, and now "
            "they clash!"
            "\n\nThe merge has already been attempted and failed. spell-book.txt now contains conflict markers."
            "\n\n[yellow]To resolve this conflict:[/]"
            "\n  1. Check the status: [cyan]git status[/]"
            "\n  2. Choose a version:"
            "\n     [cyan]git checkout --ours spell-book.txt[/]   (keep main's version)"
            "\n     [cyan]git checkout --theirs spell-book.txt[/] (keep the branch's version)"
            "\n  3. Stage the resolved file: [cyan]git add spell-book.txt[/]"
            "\n  4. Complete the merge: [cyan]git commit --no-edit[/]"
        ),
        challenge=challenge,
        exits={"forward": "room-10"},
    )


def _stash_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(
        inspector, directory, "quest-log.txt",
        "Quest 1: Slay the dragon\nQuest 2: Find the artifact",
        "Initial quest log",
    )
    (directory / "quest-log.txt").write_text(
        "Quest 1: Slay the dragon\nQuest 2: Find the artifact\nQuest 3: Work in progress..."
    )
    (directory / "notes.txt").write_text("These are my temporary notes")


def _stash_validator(directory: Path, inspector: RepoInspector) -> ChallengeResult:
    if not inspector.get_stash_list(directory).strip():
        return ChallengeResult.failed(
            "Your work has not been placed in the sanctum yet.",
            "Use 'git stash -u' to save your work in progress, including untracked files",
        )

    if "working tree clean" in inspector.get_status(directory):
        return ChallengeResult.passed(
            "Your work has been safely stored in the stash sanctum! The working directory is now clean. "
            "Use 'git stash pop' to restore your work later."
        )
    return ChallengeResult.failed(
        "The sanctum shows your stashed work, but the working directory should be clean. "
        "You may have untracked files remaining.",
        "Use 'git stash -u' to include untracked files in your stash",
    )


def stash_sanctum(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="stash-sanctum-challenge",
        description="Use git stash to temporarily save work in progress",
        inspector=inspector,
        require_git_init=True,
        custom_setup=_stash_setup,
        custom_validator=_stash_validator,
    )
    return Room(
        id="room-10",
        name="The Stash Sanctum",
        description="A mystical vault for temporary storage",
        narrative=(
            "You enter a chamber filled with swirling portals of light, each preserving work that is not "
            "yet ready to commit. quest-log.txt has unfinished changes and there's an untracked notes.txt. "
            "You need to stash ALL changes to get a completely clean working directory!"
            + COMMAND_GUIDE +
            "\n[cyan]git stash[/] - Saves uncommitted changes and cleans the working directory"
            "\n  • Use [cyan]git stash -u[/] to include untracked files"
            "\n[cyan]git stash list[/] - Shows all stashed changes"
            "\n[cyan]git stash pop[/] - Restores the most recent stash"
        ),
        challenge=challenge,
        exits={"forward": "room-10b"},
    )


def _cartography_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(inspector, directory, "journal.md", "# Expedition journal\n", "Begin the expedition journal")
    (directory / "map.md").write_text("# Expedition map\n\nThe northern passage is still unmapped.\n")


def cartographers_study(inspector: RepoInspector) -> Room:
    challenge = ScenarioChallenge(
        id="cartographers-study-challenge",
        description="Commit the expedition map on its own 'cartography' branch",
        scenario=(
            "The cartographer left an unfinished map on the desk. Before the ink dries, it must be "
            "recorded on a branch of its own so the main chronicle stays untouched."
        ),
        inspector=inspector,
        require_git_init=True,
        required_files=["map.md"],
        required_branches=["cartography"],
        required_current_branch="cartography",
        required_commit_count=2,
        require_clean_status=True,
        custom_setup=_cartography_setup,
    )
    return Room(
        id="room-10b",
        name="The Cartographer's Study",
        description="A cluttered study strewn with half-drawn maps",
        narrative=(
            f"{challenge.scenario}"
            "\n\nmap.md has appeared in your working directory."
            "\n\n[yellow]To complete this challenge:[/]"
            "\n  1. Create and switch to the branch: [cyan]git switch -c cartography[/]"
            "\n  2. Stage the map: [cyan]git add map.md[/]"
            "\n  3. Commit it: [cyan]git commit -m \"Record the expedition map\"[/]"
            "\n  4. Make sure nothing is left over: [cyan]git status[/]"
        ),
        challenge=challenge,
        exits={"forward": "room-11"},
    )


GARDEN = "Rose: Red\nTulip: Yellow"
CHERRY_PICK_NOTE = "CHERRY_PICK_THIS.txt"


def _cherry_pick_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(inspector, directory, "garden.txt", GARDEN, "Initial garden")
    _run(inspector, directory, "checkout -b experimental-flowers")
    _commit_file(inspector, directory, "garden.txt", GARDEN + "\nLavender: Purple", "Add lavender flower")
    lavender = inspector.execute("rev-parse --short=7 HEAD", directory).output.strip()
    _commit_file(
        inspector, directory, "garden.txt",
        GARDEN + "\nLavender: Purple\nPoisonIvy: Green",
        "Add poison ivy (dangerous!)",
    )
    _run(inspector, directory, "checkout main")
    _commit_file(inspector, directory, CHERRY_PICK_NOTE, f"Cherry-pick this commit: {lavender}", "Add reference file")


def _cherry_pick_validator(directory: Path, inspector: RepoInspector) -> ChallengeResult:
    garden = directory / "garden.txt"
    content = garden.read_text() if garden.is_file() else ""

    if "PoisonIvy" in content:
        return ChallengeResult.failed(
            "The poison ivy has spread to the garden! You picked the wrong commit.",
            f"Cherry-pick only the lavender commit. Check {CHERRY_PICK_NOTE} for the commit hash, "
            "then use 'git cherry-pick <hash>'",
        )
    if "Lavender" in content and inspector.get_current_branch(directory) == "main":
        return ChallengeResult.passed(
            "Perfect! You've cherry-picked only the lavender commit, leaving the dangerous poison ivy "
            "behind! This is the power of selective commit application."
        )
    return ChallengeResult.failed(
        "The lavender flower has not appeared in the main garden yet.",
        f"Read {CHERRY_PICK_NOTE} for the commit hash, then use 'git cherry-pick <hash>' while on main",
    )


def cherry_pick_garden(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="cherry-pick-garden-challenge",
        description="Use cherry-pick to selectively apply a commit from another branch",
        inspector=inspector,
        require_git_init=True,
        custom_setup=_cherry_pick_setup,
        custom_validator=_cherry_pick_validator,
    )
    return Room(
        id="room-11",
        name="The Cherry-Pick Garden",
        description="A garden where you can selectively cultivate commits",
        narrative=(
            "You step into a garden of magical flowers. Two plots lie before you: the main garden and an "
            "experimental one (the 'experimental-flowers' branch). Someone planted a beautiful lavender "
            "there, and then a dangerous poison ivy. You want the lavender, but NOT the poison ivy!"
            f"\n\nA scroll labeled '{CHERRY_PICK_NOTE}' holds the lavender commit's hash."
            "\n\n[yellow]═══ Commit Hashes ═══[/]"
            "\n  • Every commit has a unique id, e.g. [dim]a1b2c3d[/] (short) or 40 hex characters (full)"
            "\n  • [cyan]git log --oneline[/] shows the short form on the left of each line"
            "\n  • Git accepts a short hash as long as it is unique in the repository"
            + COMMAND_GUIDE +
            "\n[cyan]git cherry-pick <commit-hash>[/] - Applies one commit to your current branch"
            "\n  • Creates a new commit with the same changes (but a different hash!)"
            "\n\n[yellow]To complete this challenge:[/]"
            "\n  1. Make sure you're on main: [cyan]git branch[/]"
            "\n  2. View the experimental branch: [cyan]git log experimental-flowers --oneline[/]"
            "\n  3. Find the 'Add lavender flower' commit hash"
            "\n  4. Cherry-pick it: [cyan]git cherry-pick <commit-hash>[/]"
        ),
        challenge=challenge,
        exits={"forward": "room-12"},
    )


def _rebase_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(inspector, directory, "timeline.txt", "Event 1: Beginning", "Event 1")
    _run(inspector, directory, "checkout -b feature-timeline")
    _commit_file(
        inspector, directory, "timeline.txt", "Event 1: Beginning\nEvent 2: Feature work", "Event 2 on feature"
    )
    _run(inspector, directory, "checkout main")
    _commit_file(
        inspector, directory, "timeline.txt", "Event 1: Beginning\nEvent A: Main progress", "Event A on main"
    )
    _commit_file(
        inspector, directory, "timeline.txt",
        "Event 1: Beginning\nEvent A: Main progress\nEvent B: More main work",
        "Event B on main",
    )
    _run(inspector, directory, "checkout feature-timeline")


def _rebase_validator(directory: Path, inspector: RepoInspector) -> ChallengeResult:
    if inspector.get_current_branch(directory) != "feature-timeline":
        return ChallengeResult.failed(
            "You must be on the feature-timeline branch to complete this challenge.",
            "Switch to feature-timeline with 'git checkout feature-timeline', or finish the rebase "
            "with 'git rebase --continue'",
        )

    log = inspector.get_log(directory, 10)
    if "Event A" in log and "Event B" in log and "Event 2" in log:
        return ChallengeResult.passed(
            "The timelines have been realigned! Your feature branch now sits on top of the latest main, "
            "in one clean, linear history."
        )
    return ChallengeResult.failed(
        "The feature branch has not been rebased yet.",
        "While on feature-timeline, use 'git rebase main' to replay your feature commits on top of main",
    )


def rebase_ridge(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="rebase-ridge-challenge",
        description="Use git rebase to replay commits on a new base",
        inspector=inspector,
        require_git_init=True,
        custom_setup=_rebase_setup,
        custom_validator=_rebase_validator,
    )
    return Room(
        id="room-12",
        name="The Rebase Ridge",
        description="A ridge where timelines can be realigned",
        narrative=(
            "You stand atop a ridge overlooking two diverging paths through time. Main has moved on "
            "(Event A and Event B), while your feature-timeline branched off earlier and added Event 2. "
            "A time-weaver appears: 'Rebase can replay your feature work as if it was built on the "
            "latest main from the start!'"
            "\n\nYou are on the feature-timeline branch."
            + COMMAND_GUIDE +
            "\n[cyan]git rebase <branch>[/] - Replays your current branch's commits on top of another branch"
            "\n  • Creates a linear history with new commit hashes"
            "\n  • [red]Never rebase commits that have been shared with others![/]"
            "\n\nBoth timelines rewrote the same line, so the replay will stop on a conflict:"
            "\n  • Edit timeline.txt to keep every event"
            "\n  • Stage it: [cyan]git add timeline.txt[/]"
            "\n  • Carry on: [cyan]git rebase --continue[/]"
            "\n\n[yellow]To complete this challenge:[/]"
            "\n  1. Compare histories: [cyan]git log --oneline[/] and [cyan]git log main --oneline[/]"
            "\n  2. Rebase onto main: [cyan]git rebase main[/]"
            "\n  3. Resolve, stage and continue until the rebase finishes"
        ),
        challenge=challenge,
        exits={"forward": "room-13"},
    )


def _tag_setup(directory: Path, inspector: RepoInspector) -> None:
    _fresh_repository(directory, inspector)
    _commit_file(inspector, directory, "VERSION", "1.0.0", "Release version 1.0.0")
    _commit_file(inspector, directory, "VERSION", "1.1.0", "Release version 1.1.0")
    _commit_file(inspector, directory, "VERSION", "2.0.0", "Major release version 2.0.0")


def _tag_validator(directory: Path, inspector: RepoInspector) -> ChallengeResult:
    tags = inspector.get_tags(directory)
    has_v1 = "v1.0.0" in tags
    has_v2 = "v2.0.0" in tags

    if has_v1 and has_v2:
        return ChallengeResult.passed(
            "The version markers have been placed in the tower! You've successfully tagged important releases."
        )
    if not has_v1 and not has_v2:
        return ChallengeResult.failed(
            "No version tags have been created yet.",
            "Use 'git log --oneline' to find commits, then 'git tag v1.0.0 <commit-hash>' "
            "and 'git tag v2.0.0 <commit-hash>'",
        )
    return ChallengeResult.failed(
        "You've created some tags, but not all required versions are tagged.",
        "You need both v1.0.0 and v2.0.0 tags. Use 'git tag' to list existing tags and "
        "'git tag <name> <commit>' to create missing ones",
    )


def tag_tower(inspector: RepoInspector) -> Room:
    challenge = RepositoryChallenge(
        id="tag-tower-challenge",
        description="Create version tags to mark important milestones",
        inspector=inspector,
        require_git_init=True,
        custom_setup=_tag_setup,
        custom_validator=_tag_validator,
    )
    return Room(
        id="room-13",
        name="The Tag Tower",
        description="A tower containing markers for significant moments",
        narrative=(
            "You enter a tall tower with crystalline markers floating at different heights. The tower "
            "keeper explains: 'Tags are permanent bookmarks for important commits. Unlike branches, "
            "tags don't move.' Three commits represent releases 1.0.0, 1.1.0 and 2.0.0. Tag the major "
            "releases: v1.0.0 and v2.0.0."
            + COMMAND_GUIDE +
            "\n[cyan]git tag <tag-name> <commit-hash>[/] - Creates a tag at a specific commit"
            "\n[cyan]git tag[/] - Lists all tags"
            "\n\n[yellow]To complete this challenge:[/]"
            "\n  1. View the commit history: [cyan]git log --oneline[/]"
            "\n  2. Tag the 1.0.0 commit: [cyan]git tag v1.0.0 <commit-hash>[/]"
            "\n  3. Tag the 2.0.0 commit: [cyan]git tag v2.0.0 <commit-hash>[/]"
        ),
        challenge=challenge,
        exits={"forward": "room-end"},
    )


def exit_gate(inspector: RepoInspector) -> Room:
    return Room(
        id="room-end",
        name="The Exit Gate",
        description="Daylight spills through an open gate",
        narrative=(
            "The final door swings open and daylight floods in. Behind you, every chamber's history is "
            "safely committed. You have escaped the dungeon."
        ),
        is_end_room=True,
    )


RoomBuilder = Callable[[RepoInspector], Room]

ROOM_BUILDERS: list[RoomBuilder] = [
    initialization_chamber,
    staging_area,
    history_archive,
    status_chamber,
    branch_junction,
    merge_nexus,
    restoration_vault,
    quiz_masters_hall,
    conflict_catacombs,
    stash_sanctum,
    cartographers_study,
    cherry_pick_garden,
    rebase_ridge,
    tag_tower,
    exit_gate,
]
