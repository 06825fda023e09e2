"""
Unit tests for the Player state machine.

Tests cover:
- Turning table and left/right inverse property
- Construction defaults per slot
- Lifecycle transitions (activate, lose, eliminate/deactivate)
- Trail FIFO behaviour and the max length bound
- Growth by pills
- Illegal transitions
"""

import pytest

from snake_arena.core.config import PlayerConfig
from snake_arena.core.player import (
    Direction,
    Player,
    PlayerState,
    new_direction,
)
from snake_arena.utils.spatial import Vec2


HALF = (640.0, 360.0)


@pytest.fixture
def config() -> PlayerConfig:
    return PlayerConfig()


@pytest.fixture
def player(config) -> Player:
    return Player(0, config)


@pytest.fixture
def playing(config) -> Player:
    p = Player(1, config)
    p.activate()
    return p


# ---------------------------------------------------------------------------
# Direction
# ---------------------------------------------------------------------------

class TestDirection:
    @pytest.mark.parametrize("current, left, right", [
        (Direction.UP, Direction.LEFT, Direction.RIGHT),
        (Direction.RIGHT, Direction.UP, Direction.DOWN),
        (Direction.DOWN, Direction.RIGHT, Direction.LEFT),
        (Direction.LEFT, Direction.DOWN, Direction.UP),
    ])
    def test_turn_table(self, current, left, right):
        assert new_direction(current, turn_left=True) is left
        assert new_direction(current, turn_left=False) is right

    @pytest.mark.parametrize("d", list(Direction))
    def test_left_then_right_is_identity(self, d):
        assert new_direction(new_direction(d, True), False) is d
        assert new_direction(new_direction(d, False), True) is d

    @pytest.mark.parametrize("d", list(Direction))
    def test_four_lefts_full_circle(self, d):
        result = d
        for _ in range(4):
            result = result.turned(True)
        assert result is d

    def test_step_vectors(self):
        assert Direction.UP.step(10) == Vec2(0, 10)
        assert Direction.RIGHT.step(10) == Vec2(10, 0)
        assert Direction.DOWN.step(10) == Vec2(0, -10)
        assert Direction.LEFT.step(10) == Vec2(-10, 0)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestPlayerInit:
    def test_starts_waiting(self, player):
        assert player.state is PlayerState.WAITING
        assert player.is_waiting()
        assert player.trail_length == 0
        assert player.elimination_timer is None

    def test_slot_identity(self, config):
        p = Player(2, config)
        assert p.head_label == "player-head2"
        assert p.score_label == "player-score2"
        assert p.control == ("u", "i")
        assert p.sprite == "RollingBallRedAlt"
        assert p.starting_position == Vec2(100.0, 100.0)
        assert p.direction is Direction.RIGHT

    def test_index_out_of_range(self, config):
        with pytest.raises(IndexError):
            Player(4, config)
        with pytest.raises(IndexError):
            Player(-1, config)

    def test_repr(self, player):
        assert "WAITING" in repr(player)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

class TestTransitions:
    def test_activate(self, player):
        player.activate()
        assert player.is_playing()
        assert player.head_position == player.starting_position

    def test_activate_twice_raises(self, playing):
        with pytest.raises(RuntimeError):
            playing.activate()

    def test_turn_only_while_playing(self, player):
        with pytest.raises(RuntimeError):
            player.turn(True)

    def test_turn(self, playing):
        assert playing.turn(True) is Direction.UP
        assert playing.turn(False) is Direction.RIGHT

    def test_lose_starts_countdown(self, playing, config):
        assert playing.lose() is True
        assert playing.has_lost()
        assert playing.elimination_timer.remaining == pytest.approx(config.elimination_delay)

    def test_lose_is_idempotent(self, playing):
        assert playing.lose() is True
        timer = playing.elimination_timer
        assert playing.lose() is False
        assert playing.elimination_timer is timer

    def test_waiting_player_cannot_lose(self, player):
        assert player.lose() is False
        assert player.is_waiting()

    def test_elimination_countdown(self, playing):
        playing.lose()
        assert playing.tick_elimination(4.9) is False
        assert playing.tick_elimination(0.1) is True
        assert playing.tick_elimination(1.0) is False

    def test_tick_elimination_ignored_when_not_lost(self, playing):
        assert playing.tick_elimination(100.0) is False

    def test_deactivate_resets_everything(self, playing, config):
        playing.turn(True)
        playing.grow()
        for _ in range(3):
            playing.advance(HALF)
        playing.lose()

        dropped = playing.deactivate()

        assert len(dropped) == 3
        assert playing.is_waiting()
        assert playing.trail_length == 0
        assert playing.serial == 0
        assert playing.max_len == config.starting_max_len
        assert playing.direction is playing.starting_direction
        assert playing.elimination_timer is None


# ---------------------------------------------------------------------------
# Trail
# ---------------------------------------------------------------------------

class TestTrail:
    def test_first_move(self, playing, config):
        start = playing.head_position
        result = playing.advance(HALF)
        assert result.head_position == start + Vec2(config.move_distance, 0)
        assert result.added.position == start
        assert result.added.label == "player-tail1.0"
        assert result.removed is None
        assert playing.trail_labels == ["player-tail1.0"]

    def test_newest_at_front(self, playing):
        playing.advance(HALF)
        playing.advance(HALF)
        assert playing.trail_labels == ["player-tail1.1", "player-tail1.0"]

    def test_oldest_dropped_beyond_max_len(self, playing, config):
        for _ in range(config.starting_max_len):
            assert playing.advance(HALF).removed is None
        result = playing.advance(HALF)
        assert result.removed.label == "player-tail1.0"
        assert playing.trail_length == config.starting_max_len

    def test_trail_never_exceeds_max_len(self, playing):
        for i in range(50):
            if i % 7 == 0:
                playing.grow()
            if i % 3 == 0:
                playing.turn(i % 2 == 0)
            playing.advance(HALF)
            assert playing.trail_length <= playing.max_len

    def test_serial_increments_every_move(self, playing):
        for _ in range(10):
            playing.advance(HALF)
        assert playing.serial == 10

    def test_grow_delays_removal(self, playing, config):
        for _ in range(config.starting_max_len):
            playing.advance(HALF)
        assert playing.grow() == config.starting_max_len + 1
        assert playing.trail_length == config.starting_max_len
        assert playing.advance(HALF).removed is None
        assert playing.trail_length == config.starting_max_len + 1

    def test_head_wraps(self, config):
        p = Player(0, config)
        p.activate()
        half = (25.0, 25.0)
        positions = [p.advance(half).head_position for _ in range(3)]
        assert positions == [Vec2(10, 0), Vec2(20, 0), Vec2(-25.0, 0)]

    def test_advance_requires_playing(self, player):
        with pytest.raises(RuntimeError):
            player.advance(HALF)

    def test_score(self, playing):
        for _ in range(3):
            playing.advance(HALF)
        assert playing.score == 30

    def test_to_dict(self, playing):
        playing.advance(HALF)
        d = playing.to_dict()
        assert d["state"] == "PLAYING"
        assert d["index"] == 1
        assert len(d["trail"]) == 1
        assert d["elimination_remaining"] is None
