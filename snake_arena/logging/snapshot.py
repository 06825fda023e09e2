"""
Snapshot manager for the Snake Arena simulation core.

Saves and loads engine state snapshots (JSON): player slots with their
trails, every movable object, and the spawn timers.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import numpy as np

from snake_arena.simulation.engine import SimulationEngine


class SnapshotManager:
    """
    Engine snapshots under {output_dir}/snapshots/tick_{N:08d}.json.
    """

    def __init__(self, output_dir: str | Path):
        self.snapshot_dir = Path(output_dir) / "snapshots"
        self.snapshot_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, tick: int) -> Path:
        return self.snapshot_dir / f"tick_{tick:08d}.json"

    def save(self, engine: SimulationEngine) -> Path:
        """Write the engine's current state, keyed by its tick count."""
        path = self.path_for(engine.tick_count)
        path.write_text(
            json.dumps(engine_to_dict(engine), indent=2, default=_json_default),
            encoding="utf-8",
        )
        return path

    def load(self, tick: int) -> dict:
        """
        Read the snapshot taken at `tick`.

        Raises:
            FileNotFoundError: No snapshot for that tick.
        """
        path = self.path_for(tick)
        if not path.exists():
            raise FileNotFoundError(f"Snapshot not found: {path}")
        return json.loads(path.read_text(encoding="utf-8"))

    def latest(self) -> Optional[dict]:
        """Most recent snapshot, or None if none was saved."""
        ticks = self.list_snapshots()
        return self.load(ticks[-1]) if ticks else None

    def list_snapshots(self) -> list[int]:
        """Sorted tick numbers of all saved snapshots."""
        ticks = []
        for path in self.snapshot_dir.glob("tick_*.json"):
            suffix = path.stem[len("tick_"):]
            if suffix.isdigit():
                ticks.append(int(suffix))
        return sorted(ticks)


def engine_to_dict(engine: SimulationEngine) -> dict:
    """Convert engine state to a serializable dict."""
    half_extents = list(engine.half_extents) if engine.half_extents is not None else None
    return {
        "tick": engine.tick_count,
        "elapsed": round(engine.elapsed, 6),
        "seed": engine.config.arena.seed,
        "half_extents": half_extents,
        "players": [p.to_dict() for p in engine.players],
        "objects": [o.to_dict() for o in engine.registry.objects.values()],
        "timers": {
            "obstacle_spawn_remaining": engine.spawner.obstacle_timer.remaining,
            "pill_spawn_remaining": engine.spawner.pill_timer.remaining,
        },
    }


def _json_default(obj: Any) -> Any:
    """JSON serialization fallback for NumPy types."""
    if isinstance(obj, (np.integer,)):
        return int(obj)
    if isinstance(obj, (np.floating,)):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
