"""
Player (snake) state machine for the Snake Arena simulation core.

One Player exists per control slot for the whole session. A slot is never
deallocated: when its snake is eliminated the record is reset in place and
waits for the next key press.

Lifecycle:
    WAITING --control press--> PLAYING --fatal collision--> LOST
    LOST --elimination countdown expires--> WAITING (fields reset)

The trail is a FIFO of past head positions, newest first. Every move pushes
the old head position to the front; once the trail is longer than max_len
the oldest segment is dropped. Growing happens only by raising max_len.

The Player never talks to the presentation layer. Its transition methods
return what changed and the engine turns that into intents.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from snake_arena.core.config import PlayerConfig
from snake_arena.core.entities import EntityTag
from snake_arena.core.timer import Timer
from snake_arena.utils.spatial import Vec2, advance


class Direction(Enum):
    """Cardinal facing direction. Value is the unit step (dx, dy), y up."""
    UP = (0, 1)
    RIGHT = (1, 0)
    DOWN = (0, -1)
    LEFT = (-1, 0)

    def turned(self, turn_left: bool) -> Direction:
        return new_direction(self, turn_left)

    def step(self, distance: float) -> Vec2:
        dx, dy = self.value
        return Vec2(dx * distance, dy * distance)


# current -> (left turn, right turn)
_TURNS: dict[Direction, tuple[Direction, Direction]] = {
    Direction.UP: (Direction.LEFT, Direction.RIGHT),
    Direction.RIGHT: (Direction.UP, Direction.DOWN),
    Direction.DOWN: (Direction.RIGHT, Direction.LEFT),
    Direction.LEFT: (Direction.DOWN, Direction.UP),
}


def new_direction(current: Direction, turn_left: bool) -> Direction:
    """Rotate 90 degrees left or right."""
    left, right = _TURNS[current]
    return left if turn_left else right


class PlayerState(Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    LOST = "lost"


@dataclass(frozen=True, slots=True)
class TrailSegment:
    """A past head position kept as part of the snake's body."""
    tag: EntityTag
    position: Vec2

    @property
    def label(self) -> str:
        return self.tag.label


@dataclass(frozen=True, slots=True)
class MoveResult:
    """What one player move changed."""
    head_position: Vec2
    added: TrailSegment
    removed: Optional[TrailSegment]


class Player:
    """
    One snake and its control slot.

    Static attributes:
        index: Slot number (0..max_players-1).
        sprite: Visual preset for head and trail.
        head_tag: Tag of the head entity.
        score_label: Label of the score text entity.
        control: (turn_left_key, turn_right_key).
        starting_direction: Direction after every reset.
        starting_position: Head position on activation.

    Variable attributes:
        state: Lifecycle state.
        direction: Current facing direction.
        head_position: Canonical head position (meaningful unless WAITING).
        trail: Deque of TrailSegment, front = newest.
        max_len: Current trail length cap.
        serial: Next trail label serial.
        elimination_timer: Countdown running while LOST, else None.
        score_visible: Whether a score text from a previous run is on screen.
    """

    __slots__ = (
        "index", "sprite", "head_tag", "score_label", "control",
        "starting_direction", "starting_position",
        "state", "direction", "head_position", "trail", "max_len", "serial",
        "elimination_timer", "score_visible", "_config",
    )

    def __init__(self, index: int, config: PlayerConfig):
        if not (0 <= index < config.max_players):
            raise IndexError(f"Player index {index} out of range 0..{config.max_players - 1}")
        self._config = config
        self.index = index
        self.sprite: str = config.sprite_presets[index]
        self.head_tag = EntityTag.player_head(index)
        self.score_label = f"player-score{index}"
        left, right = config.controls[index]
        self.control: tuple[str, str] = (left, right)
        self.starting_direction = Direction[config.starting_direction]
        self.starting_position = Vec2(index * config.start_spacing, index * config.start_spacing)

        self.score_visible = False
        self.state = PlayerState.WAITING
        self.direction = self.starting_direction
        self.head_position = self.starting_position
        self.trail: deque[TrailSegment] = deque()
        self.max_len: int = config.starting_max_len
        self.serial: int = 0
        self.elimination_timer: Optional[Timer] = None

    # ------------------------------------------------------------------
    # State queries
    # ------------------------------------------------------------------

    @property
    def head_label(self) -> str:
        return self.head_tag.label

    @property
    def turn_left_key(self) -> str:
        return self.control[0]

    @property
    def turn_right_key(self) -> str:
        return self.control[1]

    def is_waiting(self) -> bool:
        return self.state is PlayerState.WAITING

    def is_playing(self) -> bool:
        return self.state is PlayerState.PLAYING

    def has_lost(self) -> bool:
        return self.state is PlayerState.LOST

    @property
    def trail_length(self) -> int:
        return len(self.trail)

    @property
    def score(self) -> int:
        """Points shown on elimination."""
        return len(self.trail) * self._config.points_per_segment

    @property
    def trail_labels(self) -> list[str]:
        return [segment.label for segment in self.trail]

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def activate(self) -> None:
        """WAITING → PLAYING. The head appears at the starting position."""
        if not self.is_waiting():
            raise RuntimeError(f"Player {self.index} cannot activate from {self.state.name}")
        self.state = PlayerState.PLAYING
        self.head_position = self.starting_position

    def turn(self, turn_left: bool) -> Direction:
        """Rotate the facing direction 90 degrees. Only while PLAYING."""
        if not self.is_playing():
            raise RuntimeError(f"Player {self.index} cannot turn while {self.state.name}")
        self.direction = self.direction.turned(turn_left)
        return self.direction

    def lose(self) -> bool:
        """
        PLAYING → LOST and start the elimination countdown.

        Returns:
            True if the player transitioned, False if it was not playing.
        """
        if not self.is_playing():
            return False
        self.state = PlayerState.LOST
        self.elimination_timer = Timer(self._config.elimination_delay, repeating=False)
        return True

    def grow(self) -> int:
        """Raise the trail cap by one. Returns the new max_len."""
        self.max_len += 1
        return self.max_len

    def tick_elimination(self, delta: float) -> bool:
        """Advance the LOST countdown. Returns True when it expires."""
        if not self.has_lost() or self.elimination_timer is None:
            return False
        return self.elimination_timer.tick(delta)

    def deactivate(self) -> list[TrailSegment]:
        """
        Return the player to the same state as right after construction.

        Returns:
            The trail segments that were dropped.
        """
        dropped = list(self.trail)
        self.trail.clear()
        self.max_len = self._config.starting_max_len
        self.serial = 0
        self.direction = self.starting_direction
        self.head_position = self.starting_position
        self.state = PlayerState.WAITING
        self.elimination_timer = None
        return dropped

    # ------------------------------------------------------------------
    # Movement
    # ------------------------------------------------------------------

    def next_trail_tag(self) -> EntityTag:
        tag = EntityTag.player_trail(self.index, self.serial)
        self.serial += 1
        return tag

    def advance(self, half_extents: tuple[float, float]) -> MoveResult:
        """
        Move the head one step and push the old head position onto the trail.

        Args:
            half_extents: Arena half-extents for wraparound.

        Returns:
            MoveResult with the new head position, the new segment and the
            segment that fell off the end (if any).
        """
        if not self.is_playing():
            raise RuntimeError(f"Player {self.index} cannot move while {self.state.name}")

        old_position = self.head_position
        self.head_position = advance(
            old_position, self.direction.step(self._config.move_distance), half_extents,
        )

        segment = TrailSegment(tag=self.next_trail_tag(), position=old_position)
        self.trail.appendleft(segment)

        removed = None
        if len(self.trail) > self.max_len:
            removed = self.trail.pop()
        if len(self.trail) > self.max_len:
            raise RuntimeError(
                f"Player {self.index} trail length {len(self.trail)} exceeds max_len {self.max_len}"
            )
        return MoveResult(head_position=self.head_position, added=segment, removed=removed)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize player state for snapshots."""
        return {
            "index": self.index,
            "state": self.state.name,
            "direction": self.direction.name,
            "head": [round(self.head_position.x, 6), round(self.head_position.y, 6)],
            "trail": [
                {"label": s.label, "x": round(s.position.x, 6), "y": round(s.position.y, 6)}
                for s in self.trail
            ],
            "max_len": self.max_len,
            "serial": self.serial,
            "score": self.score,
            "elimination_remaining": (
                round(self.elimination_timer.remaining, 6)
                if self.elimination_timer is not None else None
            ),
        }

    def __repr__(self) -> str:
        return (
            f"Player(index={self.index}, state={self.state.name}, "
            f"dir={self.direction.name}, trail={len(self.trail)}/{self.max_len})"
        )
