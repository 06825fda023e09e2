"""
Contract between the simulation core and its presentation layer.

The presentation layer draws sprites and text, plays sounds, polls the
keyboard and detects overlapping sprites. The core drives it through the
narrow Presentation protocol below and assumes every intent issued during
a tick is applied before the next tick starts.
"""

from __future__ import annotations

from typing import Iterable, NamedTuple, Protocol, Sequence, runtime_checkable

from snake_arena.utils.spatial import Vec2


class CollisionEvent(NamedTuple):
    """Two labelled sprites started (is_start=True) or stopped overlapping."""
    label_a: str
    label_b: str
    is_start: bool = True


@runtime_checkable
class Presentation(Protocol):
    """Rendering, input and audio collaborator."""

    def arena_half_extents(self) -> tuple[float, float]:
        """Half the viewport size. Queried once, on the first tick."""
        ...

    def keys_just_pressed(self, candidates: Iterable[str]) -> set[str]:
        """Subset of candidates pressed during the current frame."""
        ...

    def key_is_down(self, key: str) -> bool:
        ...

    def spawn_entity(self, label: str, preset: str, position: Vec2, scale: float, collidable: bool) -> None:
        ...

    def move_entity(self, label: str, position: Vec2) -> None:
        ...

    def despawn_entity(self, label: str) -> None:
        ...

    def spawn_text(self, label: str, content: str, position: Vec2, scale: float) -> None:
        ...

    def despawn_text(self, label: str) -> None:
        ...

    def play_sound(self, preset: str, volume: float) -> None:
        ...

    def drain_collision_events(self) -> Sequence[CollisionEvent]:
        """Return and forget the collision events gathered since the last call."""
        ...
