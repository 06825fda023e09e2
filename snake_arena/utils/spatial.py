"""
Spatial utilities for the Snake Arena simulation core.

Provides the 2D vector type used for positions and velocities, plus the
arena boundary math: coordinate wraparound against a rectangle centred at
the origin, and the movement helpers built on top of it.

The arena spans [-half_x, +half_x] x [-half_y, +half_y]. Leaving the arena
on one side teleports the entity to the opposite edge (a hard wrap, not a
reflection and not a modulo).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vec2:
    """Immutable 2D vector (virtual pixels, or pixels per move)."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def dot(self, other: Vec2) -> float:
        return self.x * other.x + self.y * other.y

    def length_sq(self) -> float:
        """Squared length. Avoids a sqrt and is sufficient for comparisons."""
        return self.x * self.x + self.y * self.y


ZERO = Vec2(0.0, 0.0)


def wrap_coordinate(value: float, half_extent: float) -> float:
    """
    Wrap a single coordinate against [-half_extent, +half_extent].

    Args:
        value: Raw coordinate after a move.
        half_extent: Half the arena size on this axis.

    Returns:
        -half_extent if value overshot the upper bound, +half_extent if it
        overshot the lower bound, otherwise value unchanged.
    """
    if value > half_extent:
        return -half_extent
    if value < -half_extent:
        return half_extent
    return value


def wrap_position(pos: Vec2, half_extents: tuple[float, float]) -> Vec2:
    """Wrap both axes of a position independently."""
    half_x, half_y = half_extents
    return Vec2(wrap_coordinate(pos.x, half_x), wrap_coordinate(pos.y, half_y))


def advance(pos: Vec2, velocity: Vec2, half_extents: tuple[float, float]) -> Vec2:
    """
    Advance a position by one velocity step and wrap at the arena bounds.

    Args:
        pos: Current position.
        velocity: Displacement for one move.
        half_extents: (half_x, half_y) of the arena.

    Returns:
        New wrapped position.
    """
    return wrap_position(pos + velocity, half_extents)


def circles_overlap(a: Vec2, ra: float, b: Vec2, rb: float) -> bool:
    """Return True if two circles intersect (touching counts)."""
    radius_sum = ra + rb
    return (a - b).length_sq() <= radius_sum * radius_sum
