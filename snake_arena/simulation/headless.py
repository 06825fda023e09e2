"""
In-memory presentation layer for headless runs and tests.

HeadlessPresentation implements the Presentation protocol without a window:
it keeps the sprite and text state the core asked for, records sound cues,
accepts scripted key presses, and detects collisions itself by testing
circle overlap between collidable sprites (radius = scale * collider_radius).
Like a game engine's collision system it reports a start event when a pair
begins to overlap and an end event when it stops.

Autopilot presses random control keys so a headless session has players.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np

from snake_arena.core.config import GameConfig
from snake_arena.simulation.presentation import CollisionEvent
from snake_arena.utils.spatial import Vec2, circles_overlap


@dataclass
class SpriteState:
    preset: str
    position: Vec2
    scale: float
    collidable: bool


@dataclass
class TextState:
    content: str
    position: Vec2
    scale: float


class HeadlessPresentation:
    """
    Window-less Presentation implementation.

    Usage:
        view = HeadlessPresentation(1280, 720)
        view.press("q")        # pressed during the next engine tick
        engine.tick(1 / 60)
        view.end_frame()       # clears just-pressed keys

    Attributes:
        width, height: Viewport size.
        collider_radius: Collider radius at scale 1.0.
        sprites: label → SpriteState currently on screen.
        texts: label → TextState currently on screen.
        sounds: (preset, volume) of every sound played, in order.
        extents_queries: How often arena_half_extents() was called.
    """

    def __init__(self, width: float, height: float, collider_radius: float = 16.0):
        self.width = float(width)
        self.height = float(height)
        self.collider_radius = float(collider_radius)

        self.sprites: dict[str, SpriteState] = {}
        self.texts: dict[str, TextState] = {}
        self.sounds: list[tuple[str, float]] = []
        self.extents_queries: int = 0

        self._just_pressed: set[str] = set()
        self._held: set[str] = set()
        self._injected: list[CollisionEvent] = []
        self._overlapping: set[tuple[str, str]] = set()

    @classmethod
    def from_config(cls, config: GameConfig) -> HeadlessPresentation:
        arena = config.arena
        return cls(arena.viewport_width, arena.viewport_height, arena.collider_radius)

    # ------------------------------------------------------------------
    # Scripting helpers
    # ------------------------------------------------------------------

    def press(self, *keys: str, hold: bool = False) -> None:
        """Press keys for the current frame; hold=True keeps them down after it."""
        self._just_pressed.update(keys)
        if hold:
            self._held.update(keys)

    def release(self, *keys: str) -> None:
        self._held.difference_update(keys)

    def end_frame(self) -> None:
        """Forget this frame's presses."""
        self._just_pressed.clear()

    def inject_collision(self, label_a: str, label_b: str, is_start: bool = True) -> None:
        """Queue a collision event ahead of the detected ones."""
        self._injected.append(CollisionEvent(label_a, label_b, is_start))

    def radius_of(self, label: str) -> float:
        return self.sprites[label].scale * self.collider_radius

    # ------------------------------------------------------------------
    # Presentation protocol
    # ------------------------------------------------------------------

    def arena_half_extents(self) -> tuple[float, float]:
        self.extents_queries += 1
        return self.width / 2.0, self.height / 2.0

    def keys_just_pressed(self, candidates: Iterable[str]) -> set[str]:
        return self._just_pressed.intersection(candidates)

    def key_is_down(self, key: str) -> bool:
        return key in self._just_pressed or key in self._held

    def spawn_entity(self, label: str, preset: str, position: Vec2, scale: float, collidable: bool) -> None:
        self.sprites[label] = SpriteState(preset, position, scale, collidable)

    def move_entity(self, label: str, position: Vec2) -> None:
        self.sprites[label].position = position

    def despawn_entity(self, label: str) -> None:
        self.sprites.pop(label, None)

    def spawn_text(self, label: str, content: str, position: Vec2, scale: float) -> None:
        self.texts[label] = TextState(content, position, scale)

    def despawn_text(self, label: str) -> None:
        self.texts.pop(label, None)

    def play_sound(self, preset: str, volume: float) -> None:
        self.sounds.append((preset, volume))

    def drain_collision_events(self) -> list[CollisionEvent]:
        events = self._injected
        self._injected = []
        events.extend(self._detect_collisions())
        return events

    # ------------------------------------------------------------------
    # Collision detection
    # ------------------------------------------------------------------

    def _detect_collisions(self) -> list[CollisionEvent]:
        collidable = [
            (label, sprite) for label, sprite in self.sprites.items() if sprite.collidable
        ]
        overlapping: set[tuple[str, str]] = set()
        events: list[CollisionEvent] = []
        for (label_a, a), (label_b, b) in itertools.combinations(collidable, 2):
            pair = (label_a, label_b) if label_a < label_b else (label_b, label_a)
            if circles_overlap(
                a.position, self.radius_of(label_a),
                b.position, self.radius_of(label_b),
            ):
                overlapping.add(pair)
                if pair not in self._overlapping:
                    events.append(CollisionEvent(label_a, label_b, True))

        for pair in sorted(self._overlapping - overlapping):
            if pair[0] in self.sprites and pair[1] in self.sprites:
                events.append(CollisionEvent(pair[0], pair[1], False))

        self._overlapping = overlapping
        return events

    def __repr__(self) -> str:
        return (
            f"HeadlessPresentation({self.width:.0f}x{self.height:.0f}, "
            f"sprites={len(self.sprites)}, texts={len(self.texts)})"
        )


class Autopilot:
    """
    Presses random control keys on a HeadlessPresentation.

    Each frame, every control pair is pressed with probability
    `press_probability`, picking left or right uniformly.
    """

    def __init__(
        self,
        presentation: HeadlessPresentation,
        controls: list[tuple[str, str]],
        rng: np.random.Generator,
        press_probability: float = 0.05,
    ):
        if not (0.0 <= press_probability <= 1.0):
            raise ValueError(f"press_probability must be in [0, 1], got {press_probability}")
        self.presentation = presentation
        self.controls = controls
        self.rng = rng
        self.press_probability = press_probability
        self.presses: int = 0

    def step(self) -> Optional[list[str]]:
        """Press keys for this frame. Returns the keys pressed, or None."""
        pressed = []
        for left, right in self.controls:
            if self.rng.random() < self.press_probability:
                key = left if self.rng.random() < 0.5 else right
                pressed.append(key)
        if not pressed:
            return None
        self.presentation.press(*pressed)
        self.presses += len(pressed)
        return pressed
