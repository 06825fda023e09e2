"""
Simulation Engine: the per-frame tick of the Snake Arena core.

The engine owns the canonical game state (entity registry, fixed player
slots, timers, seeded RNG) and keeps the presentation layer in sync by
issuing spawn/move/despawn, text and sound intents.

Processing order within one tick:
  a. Obstacle-move timer → move obstacles (wraparound)
  b. Spawn timers → spawn obstacles / pills
  c. Player-move timer → advance every PLAYING snake and its trail
  d. Control input → activate WAITING players, turn PLAYING ones
  e. Elimination countdowns → LOST players return to WAITING
  f. Collision batch → pills eaten, players lost, obstacles bounced
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from typing import Callable, Optional

import numpy as np

from snake_arena.core.config import GameConfig
from snake_arena.core.entities import EntityKind, EntityTag
from snake_arena.core.player import Player
from snake_arena.core.registry import EntityRegistry
from snake_arena.core.timer import Timer
from snake_arena.simulation.physics import bounce
from snake_arena.simulation.presentation import CollisionEvent, Presentation
from snake_arena.simulation.spawner import Spawner
from snake_arena.utils.spatial import Vec2

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tick statistics
# ---------------------------------------------------------------------------

@dataclass
class TickStats:
    """Counters collected during a single tick."""
    obstacles_moved: int = 0
    obstacles_spawned: int = 0
    pills_spawned: int = 0
    player_moves: int = 0
    trail_segments_added: int = 0
    trail_segments_removed: int = 0
    players_activated: int = 0
    turns: int = 0
    players_lost: int = 0
    players_eliminated: int = 0
    pills_eaten: int = 0
    bounces: int = 0
    collisions_ignored: int = 0

    @classmethod
    def names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> dict[str, int]:
        return {name: getattr(self, name) for name in self.names()}


@dataclass
class EliminationRecord:
    """Score of one finished snake."""
    player: int
    score: int
    trail_length: int
    elapsed: float


@dataclass
class RunResult:
    """Result of a multi-tick run."""
    seed: int
    total_ticks: int = 0
    elapsed: float = 0.0
    eliminations: list[EliminationRecord] = field(default_factory=list)
    obstacles_created: int = 0
    pills_eaten: int = 0
    bounces: int = 0

    @property
    def best_score(self) -> int:
        return max((e.score for e in self.eliminations), default=0)


# ---------------------------------------------------------------------------
# Simulation Engine
# ---------------------------------------------------------------------------

class SimulationEngine:
    """
    Core simulation engine.

    Attributes:
        config: Game configuration.
        presentation: Rendering/input/audio collaborator.
        rng: Master random generator (seeded).
        registry: Labelled entities and movable objects.
        players: Fixed-length list of player slots.
        spawner: Obstacle and pill spawner.
        obstacle_move_timer: Repeating obstacle movement timer.
        player_move_timer: One-shot player movement timer, reissued on fire.
        half_extents: Arena half-extents, None until the first tick.
        tick_count: Ticks executed so far.
        elapsed: Simulated seconds so far.
        eliminations: Scores of snakes eliminated so far.
        on_tick: Optional callback invoked after each tick(tick_number, engine).
    """

    def __init__(self, config: GameConfig, presentation: Presentation, seed: Optional[int] = None):
        """
        Create a simulation engine.

        Args:
            config: Game configuration.
            presentation: Collaborator receiving intents.
            seed: Random seed override. None = use config.arena.seed.
        """
        self.config = config
        if seed is not None:
            self.config.arena.seed = seed

        self.presentation = presentation
        self.rng = np.random.default_rng(self.config.arena.seed)
        self.registry = EntityRegistry()
        self.players: list[Player] = [
            Player(i, config.players) for i in range(config.players.max_players)
        ]
        self.spawner = Spawner(config, self.registry, self.rng)

        self.obstacle_move_timer = Timer(config.obstacles.move_interval, repeating=True)
        self.player_move_timer = Timer(config.players.move_interval, repeating=False)

        # Viewport size may not be known yet; captured on the first tick
        self.half_extents: Optional[tuple[float, float]] = None

        self.tick_count: int = 0
        self.elapsed: float = 0.0
        self.tick_stats = TickStats()
        self.eliminations: list[EliminationRecord] = []
        self._totals = TickStats()

        self.on_tick: Optional[Callable[[int, "SimulationEngine"], None]] = None

    # ------------------------------------------------------------------
    # Player access
    # ------------------------------------------------------------------

    def player(self, index: int) -> Player:
        """Get a player slot. Raises IndexError for an invalid index."""
        if not (0 <= index < len(self.players)):
            raise IndexError(f"Player index {index} out of range 0..{len(self.players) - 1}")
        return self.players[index]

    # ------------------------------------------------------------------
    # Core tick
    # ------------------------------------------------------------------

    def tick(self, delta: float) -> TickStats:
        """
        Execute one simulation step.

        Args:
            delta: Elapsed frame time in seconds.

        Returns:
            TickStats for this tick.
        """
        if self.half_extents is None:
            self.half_extents = self.presentation.arena_half_extents()
            logger.info("Arena half-extents: %.1f x %.1f", *self.half_extents)

        stats = TickStats()

        self._move_obstacles(delta, stats)
        self._spawn(delta, stats)
        self._move_players(delta, stats)
        self._handle_input(stats)
        self._tick_eliminations(delta, stats)
        self._resolve_collisions(stats)

        self.tick_count += 1
        self.elapsed += delta
        self.tick_stats = stats
        for name in TickStats.names():
            setattr(self._totals, name, getattr(self._totals, name) + getattr(stats, name))

        if self.on_tick is not None:
            self.on_tick(self.tick_count, self)

        return stats

    # --- a. Obstacle movement -----------------------------------------

    def _move_obstacles(self, delta: float, stats: TickStats) -> None:
        if not self.obstacle_move_timer.tick(delta):
            return
        for obstacle in self.registry.move_obstacles(self.half_extents):
            self.presentation.move_entity(obstacle.label, obstacle.position)
            stats.obstacles_moved += 1

    # --- b. Spawning ---------------------------------------------------

    def _spawn(self, delta: float, stats: TickStats) -> None:
        batch = self.spawner.tick(delta, self.half_extents)
        for obstacle in batch.obstacles:
            self.presentation.spawn_entity(
                obstacle.label, self.config.obstacles.preset,
                obstacle.position, obstacle.scale, True,
            )
        for pill in batch.pills:
            self.presentation.spawn_entity(
                pill.label, self.config.pills.preset,
                pill.position, pill.scale, True,
            )
        stats.obstacles_spawned += len(batch.obstacles)
        stats.pills_spawned += len(batch.pills)

    # --- c. Player movement --------------------------------------------

    def _move_players(self, delta: float, stats: TickStats) -> None:
        if not self.player_move_timer.tick(delta):
            return
        self.player_move_timer = Timer(self.config.players.move_interval, repeating=False)

        tail_scale = self.config.players.tail_scale
        for player in self.players:
            if not player.is_playing():
                continue

            result = player.advance(self.half_extents)
            self.presentation.move_entity(player.head_label, result.head_position)

            self.registry.register(result.added.tag)
            self.presentation.spawn_entity(
                result.added.label, player.sprite, result.added.position, tail_scale, True,
            )
            stats.trail_segments_added += 1

            if result.removed is not None:
                self.registry.unregister(result.removed.label)
                self.presentation.despawn_entity(result.removed.label)
                stats.trail_segments_removed += 1
            stats.player_moves += 1

    # --- d. Input --------------------------------------------------------

    def _handle_input(self, stats: TickStats) -> None:
        for player in self.players:
            if not self.presentation.keys_just_pressed(set(player.control)):
                continue

            if player.is_playing():
                # Left wins when both keys are down
                player.turn(self.presentation.key_is_down(player.turn_left_key))
                stats.turns += 1
            elif player.is_waiting():
                self._activate(player)
                stats.players_activated += 1
                if self.config.players.turn_on_activation:
                    player.turn(self.presentation.key_is_down(player.turn_left_key))
                    stats.turns += 1

    def _activate(self, player: Player) -> None:
        if player.score_visible:
            self.presentation.despawn_text(player.score_label)
            player.score_visible = False
        player.activate()
        self.registry.register(player.head_tag)
        self.presentation.spawn_entity(
            player.head_label, player.sprite, player.head_position,
            self.config.players.head_scale, True,
        )
        logger.info("Player %d joined", player.index)

    # --- e. Elimination ------------------------------------------------

    def _tick_eliminations(self, delta: float, stats: TickStats) -> None:
        for player in self.players:
            if not player.has_lost():
                continue
            if player.tick_elimination(delta):
                self._eliminate(player)
                stats.players_eliminated += 1

    def _eliminate(self, player: Player) -> None:
        cfg = self.config.players
        half_x, half_y = self.half_extents
        score = player.score
        offset_x, offset_y = cfg.score_text_offset
        self.presentation.spawn_text(
            player.score_label,
            f"Player {player.index}: {score} points",
            Vec2(-half_x + offset_x + player.index * cfg.score_text_spacing, half_y - offset_y),
            cfg.score_text_scale,
        )
        player.score_visible = True

        self.registry.unregister(player.head_label)
        self.presentation.despawn_entity(player.head_label)
        trail_length = player.trail_length
        for segment in player.deactivate():
            self.registry.unregister(segment.label)
            self.presentation.despawn_entity(segment.label)

        self.eliminations.append(
            EliminationRecord(player.index, score, trail_length, self.elapsed)
        )
        logger.info("Player %d eliminated with %d points", player.index, score)

    # --- f. Collisions -------------------------------------------------

    def _resolve_collisions(self, stats: TickStats) -> None:
        for event in self.presentation.drain_collision_events():
            if not event.is_start:
                continue
            self.resolve_collision(event, stats)

    def resolve_collision(self, event: CollisionEvent, stats: Optional[TickStats] = None) -> None:
        """
        Interpret one collision-start event.

        Head involved → player-vs-X. Two obstacles → bounce, unless their
        centres coincide. Anything else, including labels the registry no
        longer knows, is ignored.
        """
        if stats is None:
            stats = self.tick_stats
        tag_a = self.registry.classify(event.label_a)
        tag_b = self.registry.classify(event.label_b)
        if tag_a is None or tag_b is None:
            logger.debug("Ignoring collision with unknown label: %s", event)
            stats.collisions_ignored += 1
            return

        heads = [t for t in (tag_a, tag_b) if t.kind is EntityKind.PLAYER_HEAD]
        if heads:
            if len(heads) == 2:
                self._player_hit(tag_a, tag_b, stats)
                self._player_hit(tag_b, tag_a, stats)
            elif tag_a.kind is EntityKind.PLAYER_HEAD:
                self._player_hit(tag_a, tag_b, stats)
            else:
                self._player_hit(tag_b, tag_a, stats)
        elif tag_a.kind is EntityKind.OBSTACLE and tag_b.kind is EntityKind.OBSTACLE:
            a = self.registry.get(tag_a.label)
            b = self.registry.get(tag_b.label)
            # Both wrapped onto the same edge point: no line of centres to bounce along
            if (a.position - b.position).length_sq() == 0:
                logger.debug("Ignoring bounce of coincident obstacles: %s", event)
                stats.collisions_ignored += 1
                return
            bounce(a, b)
            stats.bounces += 1
        else:
            stats.collisions_ignored += 1

    def _player_hit(self, head: EntityTag, other: EntityTag, stats: TickStats) -> None:
        player = self.player(head.owner)
        if not player.is_playing():
            return

        audio = self.config.audio
        if other.kind is EntityKind.PILL:
            player.grow()
            self.registry.remove_object(other.label)
            self.presentation.despawn_entity(other.label)
            self.presentation.play_sound(audio.positive_sound, audio.volume)
            stats.pills_eaten += 1
        elif player.lose():
            self.presentation.play_sound(audio.negative_sound, audio.volume)
            stats.players_lost += 1
            logger.info("Player %d lost (hit %s)", player.index, other.label)

    # ------------------------------------------------------------------
    # Multi-tick run
    # ------------------------------------------------------------------

    def run(self, seconds: float, frame_delta: float = 1.0 / 60.0) -> RunResult:
        """
        Run the simulation for a fixed amount of simulated time.

        Args:
            seconds: Simulated duration.
            frame_delta: Elapsed time per tick.

        Returns:
            RunResult with summary statistics.
        """
        if frame_delta <= 0:
            raise ValueError(f"frame_delta must be > 0, got {frame_delta}")

        ticks = int(round(seconds / frame_delta))
        for _ in range(ticks):
            self.tick(frame_delta)

        return RunResult(
            seed=self.config.arena.seed,
            total_ticks=self.tick_count,
            elapsed=self.elapsed,
            eliminations=list(self.eliminations),
            obstacles_created=self._totals.obstacles_spawned,
            pills_eaten=self._totals.pills_eaten,
            bounces=self._totals.bounces,
        )

    def get_accumulated_stats(self) -> dict[str, int]:
        """Sum of all tick stats since the engine was created."""
        return self._totals.to_dict()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def active_players(self) -> list[Player]:
        return [p for p in self.players if p.is_playing()]

    @property
    def obstacle_count(self) -> int:
        return self.registry.obstacle_count

    @property
    def pill_count(self) -> int:
        return self.registry.pill_count

    def __repr__(self) -> str:
        return (
            f"SimulationEngine(tick={self.tick_count}, "
            f"playing={len(self.active_players)}, "
            f"obstacles={self.obstacle_count}, pills={self.pill_count})"
        )
