"""
Configuration system for the Snake Arena simulation core.

Provides a hierarchical dataclass-based config with JSON serialization,
validation, and defaults matching the arcade game's tuning.
"""

from __future__ import annotations

import json
import warnings
from copy import deepcopy
from dataclasses import asdict, dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Optional


DIRECTION_NAMES = ("UP", "RIGHT", "DOWN", "LEFT")


def _check_range(name: str, rng: list[float], errors: list[str], min_value: float = 0.0) -> None:
    if len(rng) != 2 or rng[0] >= rng[1]:
        errors.append(f"{name} must be [low, high] with low < high")
    elif rng[0] <= min_value:
        errors.append(f"{name} values must be > {min_value}, got {rng}")


# ---------------------------------------------------------------------------
# Sub-config dataclasses (grouped by domain)
# ---------------------------------------------------------------------------

@dataclass
class ArenaConfig:
    """Arena, randomness and headless viewport settings."""
    seed: int = 42
    spawn_margin: float = 20.0          # inset from each wall for spawned entities
    viewport_width: float = 1280.0      # only used by the headless presentation
    viewport_height: float = 720.0
    collider_radius: float = 16.0       # collider radius at scale 1.0 (headless)

    def validate(self) -> list[str]:
        errors = []
        if self.spawn_margin < 0:
            errors.append(f"arena.spawn_margin must be >= 0, got {self.spawn_margin}")
        if self.viewport_width <= 2 * self.spawn_margin:
            errors.append("arena.viewport_width must be larger than twice spawn_margin")
        if self.viewport_height <= 2 * self.spawn_margin:
            errors.append("arena.viewport_height must be larger than twice spawn_margin")
        if self.collider_radius <= 0:
            errors.append(f"arena.collider_radius must be > 0, got {self.collider_radius}")
        return errors


@dataclass
class PlayerConfig:
    """Player slots, controls and snake tuning."""
    max_players: int = 4

    # One [turn_left, turn_right] key pair per player slot
    controls: list[list[str]] = field(
        default_factory=lambda: [["q", "w"], ["f", "g"], ["u", "i"], ["k", "l"]]
    )
    sprite_presets: list[str] = field(
        default_factory=lambda: [
            "RollingBallBlueAlt",
            "RollingBallBlue",
            "RollingBallRedAlt",
            "RollingBallRed",
        ]
    )

    move_interval: float = 0.1          # seconds per move
    move_distance: float = 10.0         # virtual pixels per move
    head_scale: float = 0.3
    tail_scale: float = 0.2
    starting_max_len: int = 4
    elimination_delay: float = 5.0      # seconds frozen after losing
    start_spacing: float = 50.0         # start position = index * spacing on both axes
    starting_direction: str = "RIGHT"
    turn_on_activation: bool = False    # apply a turn on the press that activates

    # Score readout
    points_per_segment: int = 10
    score_text_scale: float = 0.4
    score_text_offset: list[float] = field(default_factory=lambda: [100.0, 50.0])
    score_text_spacing: float = 100.0

    def validate(self) -> list[str]:
        errors = []
        if self.max_players < 1:
            errors.append(f"players.max_players must be >= 1, got {self.max_players}")
        if len(self.controls) < self.max_players:
            errors.append(
                f"players.controls needs {self.max_players} key pairs, got {len(self.controls)}"
            )
        for i, pair in enumerate(self.controls):
            if len(pair) != 2 or pair[0] == pair[1]:
                errors.append(f"players.controls[{i}] must be two distinct keys")
        all_keys = [key for pair in self.controls[:self.max_players] for key in pair]
        if len(set(all_keys)) != len(all_keys):
            errors.append("players.controls must not share keys between players")
        if len(self.sprite_presets) < self.max_players:
            errors.append(
                f"players.sprite_presets needs {self.max_players} entries, got {len(self.sprite_presets)}"
            )
        if self.move_interval <= 0:
            errors.append(f"players.move_interval must be > 0, got {self.move_interval}")
        if self.move_distance <= 0:
            errors.append(f"players.move_distance must be > 0, got {self.move_distance}")
        if self.head_scale <= 0 or self.tail_scale <= 0:
            errors.append("players.head_scale and players.tail_scale must be > 0")
        if self.starting_max_len < 0:
            errors.append(f"players.starting_max_len must be >= 0, got {self.starting_max_len}")
        if self.elimination_delay <= 0:
            errors.append(f"players.elimination_delay must be > 0, got {self.elimination_delay}")
        if self.starting_direction not in DIRECTION_NAMES:
            errors.append(
                f"players.starting_direction must be one of {DIRECTION_NAMES}, "
                f"got '{self.starting_direction}'"
            )
        if self.points_per_segment < 0:
            errors.append(f"players.points_per_segment must be >= 0, got {self.points_per_segment}")
        if len(self.score_text_offset) != 2:
            errors.append("players.score_text_offset must have exactly 2 elements [x, y]")
        return errors


@dataclass
class ObstacleConfig:
    """Bouncing obstacle movement and spawning."""
    move_interval: float = 0.1
    initial_spawn_interval: float = 6.0     # repeating until the first spawn
    spawn_interval_range: list[float] = field(default_factory=lambda: [2.0, 10.0])
    scale_range: list[float] = field(default_factory=lambda: [0.2, 1.2])
    speed_constant: float = 2.0             # velocity in [-k/scale, k/scale]
    preset: str = "RacingBarrelRed"

    def validate(self) -> list[str]:
        errors = []
        if self.move_interval <= 0:
            errors.append(f"obstacles.move_interval must be > 0, got {self.move_interval}")
        if self.initial_spawn_interval <= 0:
            errors.append(
                f"obstacles.initial_spawn_interval must be > 0, got {self.initial_spawn_interval}"
            )
        _check_range("obstacles.spawn_interval_range", self.spawn_interval_range, errors)
        _check_range("obstacles.scale_range", self.scale_range, errors)
        if self.speed_constant < 0:
            errors.append(f"obstacles.speed_constant must be >= 0, got {self.speed_constant}")
        return errors


@dataclass
class PillConfig:
    """Pill spawning."""
    spawn_interval: float = 3.0
    # None = fixed repeating interval; [low, high] = reissue with a random interval
    spawn_interval_range: Optional[list[float]] = None
    preset: str = "RacingBarrelBlue"
    scale: float = 1.0

    def validate(self) -> list[str]:
        errors = []
        if self.spawn_interval <= 0:
            errors.append(f"pills.spawn_interval must be > 0, got {self.spawn_interval}")
        if self.spawn_interval_range is not None:
            _check_range("pills.spawn_interval_range", self.spawn_interval_range, errors)
        if self.scale <= 0:
            errors.append(f"pills.scale must be > 0, got {self.scale}")
        return errors


@dataclass
class AudioConfig:
    """Sound cue presets."""
    positive_sound: str = "Confirmation1"
    negative_sound: str = "Impact1"
    volume: float = 0.2

    def validate(self) -> list[str]:
        errors = []
        if not (0.0 <= self.volume <= 1.0):
            errors.append(f"audio.volume must be in [0, 1], got {self.volume}")
        return errors


@dataclass
class OutputConfig:
    """Run output settings."""
    output_dir: str = "runs"
    log_every_tick: bool = True
    snapshot_on_finish: bool = True

    def validate(self) -> list[str]:
        errors = []
        if not self.output_dir:
            errors.append("output.output_dir must not be empty")
        return errors


# ---------------------------------------------------------------------------
# Game config
# ---------------------------------------------------------------------------

@dataclass
class GameConfig:
    """
    Every tunable of the arena, one dataclass per concern.

    Build from JSON with `load_config()`; `validate()` collects the
    problems of all sections.
    """
    arena: ArenaConfig = field(default_factory=ArenaConfig)
    players: PlayerConfig = field(default_factory=PlayerConfig)
    obstacles: ObstacleConfig = field(default_factory=ObstacleConfig)
    pills: PillConfig = field(default_factory=PillConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def sections(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def validate(self) -> list[str]:
        """Problems found in all sections, empty when the config is usable."""
        errors: list[str] = []
        for section in self.sections().values():
            errors.extend(section.validate())
        return errors

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameConfig:
        """Defaults overlaid with `data`; unknown keys warn and are skipped."""
        config = cls()
        _overlay(config, data)
        return config

    def copy(self) -> GameConfig:
        return deepcopy(self)


# ---------------------------------------------------------------------------
# Loading, saving, overrides
# ---------------------------------------------------------------------------

def _overlay(target: Any, data: dict[str, Any]) -> None:
    if not isinstance(data, dict):
        return
    names = {f.name for f in fields(target)}
    for key, value in data.items():
        if key not in names:
            warnings.warn(
                f"Unknown config key '{key}' in {type(target).__name__}, ignored",
                UserWarning,
                stacklevel=3,
            )
            continue
        current = getattr(target, key)
        if is_dataclass(current) and isinstance(value, dict):
            _overlay(current, value)
        else:
            setattr(target, key, value)


def load_config(path: str | Path) -> GameConfig:
    """
    Read a JSON config; absent keys keep their defaults.

    Raises:
        FileNotFoundError: No file at `path`.
        json.JSONDecodeError: The file is not valid JSON.
        ValueError: The merged config fails validation.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    config = GameConfig.from_dict(json.loads(path.read_text(encoding="utf-8")))
    errors = config.validate()
    if errors:
        raise ValueError("Invalid configuration:\n" + "\n".join(f"  - {e}" for e in errors))
    return config


def save_config(config: GameConfig, path: str | Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")


def get_default_config() -> GameConfig:
    """Built-in tuning. Fails loudly if the defaults themselves are inconsistent."""
    config = GameConfig()
    errors = config.validate()
    if errors:
        raise ValueError(f"Default config is invalid: {errors}")
    return config


def apply_param_override(config: GameConfig, dotted_key: str, value: Any) -> None:
    """
    Set one value by dotted path, e.g. "players.elimination_delay".

    Raises:
        KeyError: Some part of the path does not exist.
    """
    *sections, name = dotted_key.split(".")
    target: Any = config
    for part in sections:
        _require_attr(target, part, dotted_key)
        target = getattr(target, part)
    _require_attr(target, name, dotted_key)
    setattr(target, name, value)


def _require_attr(obj: Any, name: str, dotted_key: str) -> None:
    if not hasattr(obj, name):
        raise KeyError(f"Config path '{dotted_key}' invalid: no '{name}' in {type(obj).__name__}")
