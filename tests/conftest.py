"""
Pytest fixtures for git dungeon tests.

Provides a scriptable inspector double, in-memory stores and a small
room map so most tests never shell out to git.
"""

import shutil

import pytest

from gitdungeon.challenges import QuizChallenge, RepositoryChallenge
from gitdungeon.git.inspector import GitCommandResult, GitError, parse_branches
from gitdungeon.systems.command_registry import build_default_registry
from gitdungeon.state import (
    EventBus,
    Game,
    GameManager,
    MemoryProgressStore,
    Player,
    Room,
    reset_event_bus,
)
from gitdungeon.systems.engine import GameEngine


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


class FakeInspector:
    """
    RepoInspector double with settable answers.

    Every `execute` call is recorded. `on_execute` can mutate the fake
    to simulate what a real git command would have done.
    """

    def __init__(self):
        self.repository = False
        self.status = ""
        self.log = ""
        self.reflog = ""
        self.tags = ""
        self.stash = ""
        self.remotes = ""
        self.branches = ""
        self.conflicts = False
        self.query_error: Exception | None = None
        self.execute_error: Exception | None = None
        self.responses: dict[str, GitCommandResult] = {}
        self.on_execute = None
        self.executed: list[str] = []
        self.log_requests: list[int] = []

    def _check(self):
        if self.query_error is not None:
            raise self.query_error

    def execute(self, command, working_dir):
        self.executed.append(command)
        if self.execute_error is not None:
            raise self.execute_error
        if self.on_execute is not None:
            self.on_execute(command)
        return self.responses.get(command, GitCommandResult(True, f"ran {command}", "", 0))

    def is_repository(self, directory):
        return self.repository

    def get_status(self, working_dir):
        self._check()
        return self.status

    def get_log(self, working_dir, max_count=10):
        self._check()
        self.log_requests.append(max_count)
        return self.log

    def get_reflog(self, working_dir, max_count=10):
        self._check()
        return self.reflog

    def get_tags(self, working_dir):
        self._check()
        return self.tags

    def get_stash_list(self, working_dir):
        self._check()
        return self.stash

    def get_remotes(self, working_dir):
        self._check()
        return self.remotes

    def get_branches(self, working_dir):
        self._check()
        return self.branches

    def get_current_branch(self, working_dir):
        self._check()
        return parse_branches(self.branches)[1] or ""

    def has_conflicts(self, working_dir):
        return self.conflicts


@pytest.fixture(autouse=True)
def fresh_event_bus():
    """Keep the global bus from leaking listeners between tests."""
    reset_event_bus()
    yield
    reset_event_bus()


@pytest.fixture
def inspector():
    return FakeInspector()


@pytest.fixture
def git_error():
    return GitError("get git status", "fatal: not a git repository")


@pytest.fixture
def workdir(tmp_path):
    """Existing, empty working directory."""
    path = tmp_path / "work"
    path.mkdir()
    return path


@pytest.fixture
def memory_store():
    """In-memory progress store for testing."""
    return MemoryProgressStore()


@pytest.fixture
def bus():
    return EventBus()


def build_rooms(inspector) -> dict[str, Room]:
    """
    Four-room corridor:

        start (repo init) -> quiz -> hall (no challenge) -> end
    """
    init_challenge = RepositoryChallenge(
        id="init-challenge",
        description="Initialize a repository",
        inspector=inspector,
        require_git_init=True,
    )
    quiz = QuizChallenge(
        id="quiz-challenge",
        description="Answer the question",
        question="Which command creates a repository?",
        options=["git init", "git clone", "git add"],
        correct_answer_index=0,
        hint="It starts with 'init'.",
    )
    rooms = [
        Room(
            id="start",
            name="Start Room",
            description="Where it begins",
            narrative="A [cyan]quiet[/] room.",
            challenge=init_challenge,
            exits={"Forward": "quiz"},
            is_start_room=True,
        ),
        Room(
            id="quiz",
            name="Quiz Room",
            description="A sage waits",
            challenge=quiz,
            exits={"forward": "hall", "back": "start"},
        ),
        Room(
            id="hall",
            name="Hall",
            description="An empty hall",
            exits={"forward": "end", "back": "quiz"},
        ),
        Room(
            id="end",
            name="Exit",
            description="Daylight",
            is_end_room=True,
        ),
    ]
    return {room.id: room for room in rooms}


class StaticRooms:
    """RoomSource over a fixed dict."""

    def __init__(self, rooms: dict[str, Room]):
        self.rooms = rooms

    def load_rooms(self):
        return self.rooms

    def get_start_room(self):
        return next((r for r in self.rooms.values() if r.is_start_room), None)


@pytest.fixture
def rooms(inspector):
    return build_rooms(inspector)


@pytest.fixture
def room_source(rooms):
    return StaticRooms(rooms)


@pytest.fixture
def manager(memory_store, room_source, bus):
    """Game manager with in-memory store."""
    return GameManager(memory_store, room_source, event_bus=bus)


@pytest.fixture
def game(rooms):
    return Game(Player(name="Tester"), rooms["start"], rooms)


@pytest.fixture
def engine(inspector, game, workdir, bus):
    """Engine attached to the sample game."""
    engine = GameEngine(inspector, registry=build_default_registry(), event_bus=bus)
    engine.start_game(game, workdir)
    return engine


@pytest.fixture
def git_workdir(tmp_path):
    """Empty directory for tests that run the real git binary."""
    path = tmp_path / "repo"
    path.mkdir()
    return path