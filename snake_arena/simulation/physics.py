"""
Two-body elastic collision response for circular obstacles.

The velocities of both bodies are decomposed along the line joining their
centres (parallel) and across it (perpendicular). The 1D elastic collision
formula is applied to the parallel components, weighted by mass; the
perpendicular components are kept. The result conserves momentum and
kinetic energy.

Only velocities change. Overlapping bodies are not pushed apart; the next
move step separates them.
"""

from __future__ import annotations

from snake_arena.core.entities import MovableObject
from snake_arena.utils.spatial import Vec2


def elastic_velocities(
    pos_a: Vec2, vel_a: Vec2, mass_a: float,
    pos_b: Vec2, vel_b: Vec2, mass_b: float,
) -> tuple[Vec2, Vec2]:
    """
    Compute post-collision velocities of two circular bodies.

    Args:
        pos_a, vel_a, mass_a: Position, velocity and mass of body A.
        pos_b, vel_b, mass_b: Position, velocity and mass of body B.

    Returns:
        (new_vel_a, new_vel_b).

    Raises:
        ValueError: If the centres coincide or the total mass is not positive.
    """
    x = pos_a.x - pos_b.x
    y = pos_a.y - pos_b.y
    d = x * x + y * y
    if d <= 0.0:
        raise ValueError(f"Cannot bounce bodies with coincident centres at {pos_a}")
    total_mass = mass_a + mass_b
    if total_mass <= 0.0:
        raise ValueError(f"Total mass must be > 0, got {total_mass}")

    # Components in the (x, y) / (-y, x) basis, scaled by 1/d
    u1 = (vel_a.x * x + vel_a.y * y) / d
    u2 = (x * vel_a.y - y * vel_a.x) / d
    u3 = (vel_b.x * x + vel_b.y * y) / d
    u4 = (x * vel_b.y - y * vel_b.x) / d

    parallel_a = (mass_a - mass_b) / total_mass * u1 + (2.0 * mass_b) / total_mass * u3
    parallel_b = (mass_b - mass_a) / total_mass * u3 + (2.0 * mass_a) / total_mass * u1

    new_a = Vec2(x * parallel_a - y * u2, y * parallel_a + x * u2)
    new_b = Vec2(x * parallel_b - y * u4, y * parallel_b + x * u4)
    return new_a, new_b


def bounce(a: MovableObject, b: MovableObject) -> None:
    """Apply the elastic response to two objects in place (scale is mass)."""
    a.velocity, b.velocity = elastic_velocities(
        a.position, a.velocity, a.mass,
        b.position, b.velocity, b.mass,
    )


def momentum(*bodies: MovableObject) -> Vec2:
    """Total momentum (mass * velocity) of the given bodies."""
    total = Vec2(0.0, 0.0)
    for body in bodies:
        total = total + body.velocity * body.mass
    return total


def kinetic_energy(*bodies: MovableObject) -> float:
    """Total kinetic energy of the given bodies."""
    return sum(0.5 * body.mass * body.velocity.length_sq() for body in bodies)
