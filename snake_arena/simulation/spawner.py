"""
Timer-gated spawning of obstacles and pills.

Obstacles:
  The obstacle timer starts as a repeating timer at
  `obstacles.initial_spawn_interval`. Each time it fires one obstacle is
  created and the timer is reissued as a one-shot with an interval drawn
  uniformly from `obstacles.spawn_interval_range`. Scale (= mass) is drawn
  from `obstacles.scale_range`; each velocity component is drawn from
  [-k/scale, +k/scale), so heavy obstacles drift slowly.

Pills:
  Stationary. Spawned by a repeating timer every `pills.spawn_interval`, or,
  when `pills.spawn_interval_range` is set, by a one-shot timer reissued
  with a random interval.

All placement is uniform inside the arena inset by `arena.spawn_margin`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from snake_arena.core.config import GameConfig
from snake_arena.core.entities import EntityTag, MovableObject
from snake_arena.core.registry import EntityRegistry
from snake_arena.core.timer import Timer
from snake_arena.utils.spatial import Vec2, ZERO

logger = logging.getLogger(__name__)


@dataclass
class SpawnBatch:
    """Objects created during one spawner tick."""
    obstacles: list[MovableObject] = field(default_factory=list)
    pills: list[MovableObject] = field(default_factory=list)

    def __iter__(self):
        yield from self.obstacles
        yield from self.pills

    def __len__(self) -> int:
        return len(self.obstacles) + len(self.pills)


class Spawner:
    """
    Creates obstacles and pills when their timers fire.

    Attributes:
        config: Game configuration.
        registry: Registry that receives the new objects.
        rng: Seeded random generator.
        obstacle_timer: Current obstacle spawn timer.
        pill_timer: Current pill spawn timer.
    """

    def __init__(self, config: GameConfig, registry: EntityRegistry, rng: np.random.Generator):
        self.config = config
        self.registry = registry
        self.rng = rng
        self.obstacle_timer = Timer(config.obstacles.initial_spawn_interval, repeating=True)
        if config.pills.spawn_interval_range is None:
            self.pill_timer = Timer(config.pills.spawn_interval, repeating=True)
        else:
            self.pill_timer = Timer(config.pills.spawn_interval, repeating=False)

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, delta: float, half_extents: tuple[float, float]) -> SpawnBatch:
        """
        Advance both spawn timers and create whatever is due.

        Args:
            delta: Elapsed seconds.
            half_extents: Arena half-extents.

        Returns:
            SpawnBatch with the newly registered objects.
        """
        batch = SpawnBatch()

        if self.obstacle_timer.tick(delta):
            self.obstacle_timer = Timer(self._uniform(self.config.obstacles.spawn_interval_range))
            batch.obstacles.append(self.spawn_obstacle(half_extents))

        if self.pill_timer.tick(delta):
            interval_range = self.config.pills.spawn_interval_range
            if interval_range is not None:
                self.pill_timer = Timer(self._uniform(interval_range))
            batch.pills.append(self.spawn_pill(half_extents))

        return batch

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def spawn_obstacle(self, half_extents: tuple[float, float]) -> MovableObject:
        """Create and register one obstacle with random scale and velocity."""
        cfg = self.config.obstacles
        scale = self._uniform(cfg.scale_range)
        max_speed = cfg.speed_constant / scale
        obstacle = MovableObject(
            tag=EntityTag.obstacle(self.registry.next_object_serial()),
            position=self.random_position(half_extents),
            velocity=Vec2(
                float(self.rng.uniform(-max_speed, max_speed)),
                float(self.rng.uniform(-max_speed, max_speed)),
            ),
            scale=scale,
        )
        self.registry.add_object(obstacle)
        logger.debug("Spawned %s", obstacle)
        return obstacle

    def spawn_pill(self, half_extents: tuple[float, float]) -> MovableObject:
        """Create and register one stationary pill."""
        pill = MovableObject(
            tag=EntityTag.pill(self.registry.next_object_serial()),
            position=self.random_position(half_extents),
            velocity=ZERO,
            scale=self.config.pills.scale,
        )
        self.registry.add_object(pill)
        logger.debug("Spawned %s", pill)
        return pill

    def random_position(self, half_extents: tuple[float, float]) -> Vec2:
        """Uniform position inside the arena inset by the spawn margin."""
        margin = self.config.arena.spawn_margin
        half_x, half_y = half_extents
        return Vec2(
            float(self.rng.uniform(-half_x + margin, half_x - margin)),
            float(self.rng.uniform(-half_y + margin, half_y - margin)),
        )

    def _uniform(self, bounds: list[float]) -> float:
        return float(self.rng.uniform(bounds[0], bounds[1]))
