"""Tests for rooms, players and the game state machine."""

import pytest

from gitdungeon.state import Game, GameProgress, GameStatus, Player, Room, RoomNotFoundError
from gitdungeon.state.schema import DEFAULT_PLAYER_NAME


class TestRoom:
    """Test Room model."""

    def test_directions_lowercased(self, rooms):
        assert rooms["start"].exits == {"forward": "quiz"}

    def test_exit_list(self, rooms):
        assert rooms["quiz"].exit_list == "forward, back"

    def test_rooms_are_frozen(self, rooms):
        with pytest.raises(Exception):
            rooms["hall"].name = "Renamed"

    def test_defaults(self):
        room = Room(id="r", name="Room")
        assert room.challenge is None
        assert room.exits == {}
        assert not room.is_start_room
        assert not room.is_end_room


class TestPlayer:
    """Test Player model."""

    def test_defaults(self):
        player = Player()
        assert player.name == DEFAULT_PLAYER_NAME
        assert player.move_count == 0
        assert player.completed_rooms == set()

    def test_completing_twice_is_idempotent(self):
        player = Player(name="P")
        player.complete_room("a")
        player.complete_room("a")
        player.complete_challenge("c")
        player.complete_challenge("c")
        assert player.completed_rooms == {"a"}
        assert player.has_completed_challenge("c")
        assert not player.has_completed_room("b")

    def test_record_move(self):
        player = Player()
        player.record_move()
        player.record_move()
        assert player.move_count == 2

    def test_negative_moves_rejected(self):
        with pytest.raises(Exception):
            Player(move_count=-1)

    def test_completion_percentage(self):
        player = Player(completed_rooms={"a", "b"})
        assert player.completion_percentage(4) == 50.0
        assert player.completion_percentage(0) == 0.0


class TestGameMovement:
    """Test moving between rooms."""

    def test_starts_active_in_start_room(self, game):
        assert game.is_active
        assert game.status == GameStatus.ACTIVE
        assert game.current_room.id == "start"
        assert game.completed_at is None

    def test_move_records_progress(self, game):
        assert game.move_to_room("quiz")
        assert game.current_room.id == "quiz"
        assert game.player.move_count == 1
        assert game.player.has_completed_room("quiz")

    def test_unknown_room_changes_nothing(self, game):
        assert not game.move_to_room("attic")
        assert game.current_room.id == "start"
        assert game.player.move_count == 0

    def test_end_room_completes_game_once(self, game):
        game.move_to_room("end")
        assert game.status == GameStatus.COMPLETED
        first = game.completed_at
        assert first is not None

        game.move_to_room("hall")
        game.move_to_room("end")
        assert game.completed_at == first
        assert not game.is_active

    def test_direction_lookup_is_case_insensitive(self, game):
        assert game.can_exit_in_direction(" FORWARD ")
        assert game.get_room_id_in_direction("Forward") == "quiz"
        assert game.get_room_id_in_direction("up") is None
        assert not game.can_exit_in_direction("back")


class TestGameChallenges:
    """Test challenge completion tracking."""

    def test_pending_challenge(self, game):
        assert not game.current_challenge_completed

    def test_complete_current_challenge(self, game):
        game.complete_current_challenge()
        assert game.current_challenge_completed
        assert game.player.has_completed_challenge("init-challenge")

    def test_room_without_challenge_counts_as_completed(self, game):
        game.move_to_room("hall")
        assert game.current_challenge_completed
        game.complete_current_challenge()
        assert game.player.completed_challenges == set()


class TestGameSnapshots:
    """Test GameProgress round trips."""

    def test_to_progress(self, game):
        game.move_to_room("quiz")
        game.move_to_room("hall")
        game.player.complete_challenge("quiz-challenge")
        game.player.complete_challenge("init-challenge")

        progress = game.to_progress()
        assert progress.player_name == "Tester"
        assert progress.current_room_id == "hall"
        assert progress.completed_rooms == ["hall", "quiz"]
        assert progress.completed_challenges == ["init-challenge", "quiz-challenge"]
        assert progress.move_count == 2
        assert progress.game_started == game.player.game_started

    def test_from_progress(self, rooms):
        progress = GameProgress(
            player_name="Loaded",
            current_room_id="quiz",
            completed_rooms=["quiz"],
            completed_challenges=["init-challenge"],
            move_count=3,
        )
        game = Game.from_progress(progress, rooms)
        assert game.player.name == "Loaded"
        assert game.current_room is rooms["quiz"]
        assert game.player.completed_challenges == {"init-challenge"}
        assert game.player.move_count == 3
        assert game.is_active

    def test_from_progress_unknown_room(self, rooms):
        progress = GameProgress(player_name="P", current_room_id="attic")
        with pytest.raises(RoomNotFoundError) as exc_info:
            Game.from_progress(progress, rooms)
        assert exc_info.value.room_id == "attic"
        assert str(exc_info.value) == "Room 'attic' not found"

    def test_room_not_found_is_key_error(self, rooms):
        with pytest.raises(KeyError):
            Game.from_progress(GameProgress(player_name="P", current_room_id="x"), rooms)
