"""Tests for the command engine."""

import pytest

from gitdungeon.challenges import RepositoryChallenge
from gitdungeon.challenges.hints import REPOSITORY_HINT
from gitdungeon.git.inspector import DirectoryMissingError, GitCommandResult, GitError
from gitdungeon.systems.command_registry import CommandRegistry, build_default_registry
from gitdungeon.state import EventType, Game, Player, Room
from gitdungeon.state.manager import SaveResult
from gitdungeon.systems.engine import EXIT_SENTINEL, CommandType, GameEngine


def init_repository(inspector):
    """Make `git init` flip the fake into a repository."""
    def on_execute(command):
        if command == "init":
            inspector.repository = True
    inspector.on_execute = on_execute


def walk_to_quiz(engine):
    engine.game.complete_current_challenge()
    assert engine.process_command("forward").success


class TestEngineSetup:
    """Test attaching games and directories."""

    def test_inspector_required(self):
        with pytest.raises(TypeError):
            GameEngine(None)

    def test_game_required(self, inspector, workdir):
        with pytest.raises(TypeError):
            GameEngine(inspector).start_game(None, workdir)

    def test_blank_directory_rejected(self, inspector, game):
        with pytest.raises(ValueError):
            GameEngine(inspector).start_game(game, "  ")

    def test_missing_directory_rejected(self, inspector, game, tmp_path):
        with pytest.raises(DirectoryMissingError):
            GameEngine(inspector).start_game(game, tmp_path / "nowhere")

    def test_no_game_state(self, inspector):
        state = GameEngine(inspector).get_current_state()
        assert not state.is_active
        assert state.current_room_id is None
        assert state.total_rooms_count == 0

    def test_current_state(self, engine):
        state = engine.get_current_state()
        assert state.is_active
        assert not state.is_completed
        assert state.current_room_id == "start"
        assert state.current_room_name == "Start Room"
        assert state.player_name == "Tester"
        assert state.completed_rooms_count == 0
        assert state.total_rooms_count == 4

    def test_setup_current_room(self, inspector, workdir, bus):
        challenge = RepositoryChallenge("c", "d", inspector, setup_files=["README.md"])
        room = Room(id="r", name="R", challenge=challenge, is_start_room=True)
        game = Game(Player(), room, {"r": room})
        engine = GameEngine(inspector, event_bus=bus)
        engine.start_game(game, workdir)

        engine.setup_current_room()
        assert (workdir / "README.md").is_file()

    def test_setup_skipped_when_completed(self, inspector, workdir, bus):
        challenge = RepositoryChallenge("c", "d", inspector, setup_files=["README.md"])
        room = Room(id="r", name="R", challenge=challenge, is_start_room=True)
        game = Game(Player(completed_challenges={"c"}), room, {"r": room})
        engine = GameEngine(inspector, event_bus=bus)
        engine.start_game(game, workdir)

        engine.setup_current_room()
        assert not (workdir / "README.md").exists()


class TestBasicCommands:
    """Test help, status, look, exit and unknown input."""

    def test_no_active_game(self, inspector):
        result = GameEngine(inspector).process_command("help")
        assert not result.success
        assert result.message == "No active game. Please start a game first."
        assert result.command_type == CommandType.UNKNOWN

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_command(self, engine, text):
        result = engine.process_command(text)
        assert not result.success
        assert result.message == "Command cannot be empty."

    @pytest.mark.parametrize("text", ["help", "?", "HELP"])
    def test_help(self, engine, text):
        result = engine.process_command(text)
        assert result.success
        assert result.command_type == CommandType.HELP
        assert result.message == engine.registry.help_text()

    def test_status(self, engine):
        result = engine.process_command("status")
        assert result.command_type == CommandType.STATUS
        assert result.message == (
            "Game Status:\n"
            "------------\n"
            "Player: Tester\n"
            "Current Room: Start Room\n"
            "Rooms Completed: 0/4\n"
            "Challenges Completed: 0\n"
            "Moves: 0\n"
            "\n"
            "Room Info:\n"
            "Where it begins\n"
            "\n"
            "Challenge: ○ In Progress\n"
            "\n"
            "Available Exits: forward"
        )

    def test_status_shows_completion(self, engine):
        engine.game.complete_current_challenge()
        assert "Challenge: ✓ Completed" in engine.process_command("status").message

    @pytest.mark.parametrize("text", ["look", "examine", "Look"])
    def test_look(self, engine, text):
        result = engine.process_command(text)
        assert result.command_type == CommandType.LOOK
        assert result.message == (
            "Start Room\n"
            "==========\n"
            "\n"
            "A [cyan]quiet[/] room.\n"
            "\n"
            "Challenge: Initialize a repository\n"
            "Status: ○ Not completed\n"
            "\n"
            "Exits: forward"
        )

    def test_exit(self, engine):
        result = engine.process_command("exit")
        assert result.success
        assert result.command_type == CommandType.EXIT
        assert result.message == EXIT_SENTINEL

    @pytest.mark.parametrize("text", ["dance", "exit now", "git", "help me"])
    def test_unknown(self, engine, text):
        result = engine.process_command(text)
        assert not result.success
        assert result.command_type == CommandType.UNKNOWN
        assert result.message == f"Unknown command: {text}. Type 'help' for available commands."

    def test_unexpected_error_is_reported(self, engine):
        class BrokenRegistry(CommandRegistry):
            def help_text(self):
                raise RuntimeError("boom")

        engine.registry = BrokenRegistry()
        result = engine.process_command("help")
        assert not result.success
        assert result.message == "Something went wrong: boom"


class TestMovement:
    """Test the challenge gate and room transitions."""

    def test_blocked_until_challenge_done(self, engine):
        result = engine.process_command("forward")
        assert not result.success
        assert result.command_type == CommandType.MOVEMENT
        assert result.message == "You must complete the current room's challenge before you can leave!"
        assert engine.game.current_room.id == "start"

    def test_move_forward(self, engine, bus):
        engine.game.complete_current_challenge()
        result = engine.process_command("forward")
        assert result.success
        assert result.message == "You move forward..."
        assert engine.game.current_room.id == "quiz"
        assert engine.game.player.move_count == 1
        assert bus.get_history(EventType.ROOM_ENTERED)[0].data["room_id"] == "quiz"

    def test_go_direction_case_insensitive(self, engine):
        engine.game.complete_current_challenge()
        result = engine.process_command("go Forward")
        assert result.success
        assert result.message == "You move forward..."

    def test_invalid_direction(self, engine):
        engine.game.complete_current_challenge()
        result = engine.process_command("go up")
        assert not result.success
        assert result.message == "You cannot go 'up' from here. Available exits: forward"

    def test_back_without_exit(self, engine):
        engine.game.complete_current_challenge()
        result = engine.process_command("back")
        assert result.message == "You cannot go 'back' from here. Available exits: forward"

    def test_go_without_direction(self, engine):
        engine.game.complete_current_challenge()
        result = engine.process_command("go")
        assert not result.success
        assert result.message == "You cannot go '' from here. Available exits: forward"

    def test_gate_checked_before_direction(self, engine):
        result = engine.process_command("go up")
        assert result.message == "You must complete the current room's challenge before you can leave!"

    def test_reaching_end_room(self, engine, bus):
        walk_to_quiz(engine)
        engine.process_command("answer 1")
        engine.process_command("forward")
        result = engine.process_command("forward")

        assert result.success
        assert result.message == "You move forward...\n\n*** CONGRATULATIONS! You've completed the game! ***"
        assert not engine.game.is_active
        assert engine.get_current_state().is_completed
        assert bus.get_history(EventType.GAME_COMPLETED)[0].data["moves"] == 3

    def test_room_setup_failure(self, inspector, workdir, bus):
        def broken(directory, insp):
            raise OSError("disk gone")

        trap = RepositoryChallenge("trap", "d", inspector, custom_setup=broken)
        start = Room(id="a", name="A", exits={"forward": "b"}, is_start_room=True)
        target = Room(id="b", name="B", challenge=trap, exits={"back": "a"})
        engine = GameEngine(inspector, event_bus=bus)
        engine.start_game(Game(Player(), start, {"a": start, "b": target}), workdir)

        result = engine.process_command("forward")
        assert not result.success
        assert result.message == "You move forward...\n\nThe room could not be prepared: disk gone"
        assert engine.game.current_room.id == "b"


class TestGitCommands:
    """Test git passthrough and automatic validation."""

    def test_git_completes_challenge(self, engine, inspector, bus):
        init_repository(inspector)
        result = engine.process_command("git init")

        assert result.success
        assert result.command_type == CommandType.GIT
        assert result.git_command == "init"
        assert result.message == (
            "ran init\n\n"
            "✓ Challenge completed! Challenge completed successfully! The repository is in order."
            "\nYou can now exit: forward"
        )
        assert engine.game.player.has_completed_challenge("init-challenge")
        assert bus.get_history(EventType.CHALLENGE_COMPLETED)[0].data["challenge_id"] == "init-challenge"
        assert bus.get_history(EventType.GIT_EXECUTED)[0].data["command"] == "init"

    def test_git_arguments_passed_verbatim(self, engine, inspector):
        engine.process_command('git commit -m "first commit"')
        assert inspector.executed == ['commit -m "first commit"']

    def test_git_failure_shows_error(self, engine, inspector):
        inspector.responses["status"] = GitCommandResult(False, "", "fatal: not a git repository", 128)
        result = engine.process_command("git status")
        assert not result.success
        assert result.message == "fatal: not a git repository"

    def test_git_exception(self, engine, inspector):
        inspector.execute_error = GitError("run git", "boom")
        result = engine.process_command("git status")
        assert not result.success
        assert result.message == "Git command failed: Failed to run git: boom"

    def test_unexpected_git_exception_still_revalidates(self, engine, inspector):
        inspector.repository = True
        inspector.execute_error = RuntimeError("boom")
        result = engine.process_command("git init")
        assert not result.success
        assert result.command_type == CommandType.GIT
        assert result.git_command == "init"
        assert result.message.startswith("Git command failed: boom")
        assert "✓ Challenge completed!" in result.message
        assert engine.game.current_challenge_completed

    def test_no_revalidation_after_completion(self, engine, inspector, bus):
        inspector.repository = True
        engine.game.complete_current_challenge()
        result = engine.process_command("git status")
        assert result.message == "ran status"
        assert bus.get_history(EventType.CHALLENGE_COMPLETED) == []

    def test_git_without_success_leaves_challenge_open(self, engine):
        result = engine.process_command("git status")
        assert result.message == "ran status"
        assert not engine.game.current_challenge_completed

    def test_git_in_room_without_challenge(self, engine):
        engine.game.move_to_room("hall")
        result = engine.process_command("git log")
        assert result.success
        assert result.message == "ran log"


class TestAnswers:
    """Test quiz answering."""

    def test_outside_quiz(self, engine):
        result = engine.process_command("answer 1")
        assert not result.success
        assert result.command_type == CommandType.ANSWER
        assert result.message == "This command only works in quiz challenges."

    @pytest.mark.parametrize("text", ["answer abc", "answer 0", "answer -2", "answer"])
    def test_invalid_number(self, engine, text):
        walk_to_quiz(engine)
        result = engine.process_command(text)
        assert not result.success
        assert result.message == "Please provide a valid answer number (e.g., 'answer 1' for option 1)."

    def test_out_of_range(self, engine):
        walk_to_quiz(engine)
        result = engine.process_command("answer 9")
        assert result.message == "Invalid answer. Please choose a number between 1 and 3."

    def test_wrong_answer(self, engine):
        walk_to_quiz(engine)
        result = engine.process_command("answer 2")
        assert not result.success
        assert result.message == "Incorrect. 'git clone' is not the right answer."
        assert not engine.game.current_challenge_completed

    def test_correct_answer(self, engine, bus):
        walk_to_quiz(engine)
        result = engine.process_command("answer 1")
        assert result.success
        assert result.message == (
            "Correct! git init is the right answer.\n\nChallenge completed!\nYou can now exit: forward, back"
        )
        assert engine.game.player.has_completed_challenge("quiz-challenge")
        assert len(bus.get_history(EventType.CHALLENGE_COMPLETED)) == 1

    def test_already_answered(self, engine):
        walk_to_quiz(engine)
        engine.process_command("answer 1")
        result = engine.process_command("answer 1")
        assert not result.success
        assert result.message == "You've already completed this challenge!"


class TestHints:
    """Test the hint command."""

    def test_repository_hint(self, engine):
        result = engine.process_command("hint")
        assert result.success
        assert result.command_type == CommandType.HINT
        assert result.message == f"Hint: {REPOSITORY_HINT}"

    def test_quiz_hint(self, engine):
        walk_to_quiz(engine)
        assert engine.process_command("hint").message == "Hint: It starts with 'init'."

    def test_no_challenge(self, engine):
        engine.game.move_to_room("hall")
        result = engine.process_command("hint")
        assert not result.success
        assert result.message == "There is no active challenge in this room."

    def test_completed(self, engine):
        engine.game.complete_current_challenge()
        result = engine.process_command("hint")
        assert not result.success
        assert result.message == "You've already completed this challenge!"


class TestSave:
    """Test the save command."""

    def test_no_handler(self, engine):
        result = engine.process_command("save")
        assert not result.success
        assert result.command_type == CommandType.SAVE
        assert result.message == "Save functionality is not available."

    def test_handler_result_passed_through(self, engine):
        saved = []

        def handler(game):
            saved.append(game)
            return SaveResult(True, "Saved!")

        engine.set_save_handler(handler)
        result = engine.process_command("save")
        assert result.success
        assert result.message == "Saved!"
        assert saved == [engine.game]

    def test_handler_exception(self, engine):
        def handler(game):
            raise OSError("read-only")

        engine.set_save_handler(handler)
        result = engine.process_command("save")
        assert not result.success
        assert result.message == "Failed to save game: read-only"

    def test_with_manager(self, engine, manager, memory_store):
        engine.set_save_handler(manager.save_progress)
        result = engine.process_command("save")
        assert result.success
        assert result.message == "Game progress saved successfully for Tester."
        assert memory_store.load().current_room_id == "start"


class TestRegistryWiring:
    """Engine help reflects the registry it was given."""

    def test_default_registry(self, engine):
        assert "Movement Commands:" in engine.process_command("help").message

    def test_custom_registry(self, inspector, game, workdir, bus):
        registry = build_default_registry()
        engine = GameEngine(inspector, registry=registry, event_bus=bus)
        engine.start_game(game, workdir)
        assert engine.process_command("help").message == registry.help_text()
