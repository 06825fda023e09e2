"""
Run directories for headless Snake Arena sessions.

    {base_dir}/{run_name}/
        config.json      game config the session ran with
        ticks.csv        one row of TickStats per tick
        snapshots/       engine state as JSON
        summary.json     written by finalize()
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from snake_arena.core.config import GameConfig, save_config
from snake_arena.logging.csv_logger import CSVLogger
from snake_arena.logging.snapshot import SnapshotManager
from snake_arena.simulation.engine import SimulationEngine, TickStats

CONFIG_FILE = "config.json"
TICKS_FILE = "ticks.csv"
SUMMARY_FILE = "summary.json"


class RunManager:
    """
    Owns one session's output directory.

    Args:
        config: Saved as config.json when the directory is created.
        base_dir: Parent of the run directory. None = config.output.output_dir.
        run_name: Directory name. None = current timestamp.

    Attributes:
        run_dir: This session's directory.
        csv_logger: Tick counter log (ticks.csv).
        snapshot_manager: Engine snapshots (snapshots/).
    """

    def __init__(
        self,
        config: GameConfig,
        base_dir: Optional[str | Path] = None,
        run_name: Optional[str] = None,
    ):
        base = Path(base_dir if base_dir is not None else config.output.output_dir)
        name = run_name or datetime.now().strftime("%Y%m%d_%H%M%S")

        self.run_dir = base / name
        self.run_dir.mkdir(parents=True, exist_ok=True)
        save_config(config, self.config_path)

        self.csv_logger = CSVLogger(self.run_dir / TICKS_FILE)
        self.snapshot_manager = SnapshotManager(self.run_dir)

    @property
    def config_path(self) -> Path:
        return self.run_dir / CONFIG_FILE

    @property
    def ticks_path(self) -> Path:
        return self.csv_logger.file_path

    @property
    def snapshots_dir(self) -> Path:
        return self.snapshot_manager.snapshot_dir

    @property
    def summary_path(self) -> Path:
        return self.run_dir / SUMMARY_FILE

    def log_tick(self, tick: int, elapsed: float, stats: TickStats) -> None:
        self.csv_logger.log_tick(tick, elapsed, stats)

    def save_snapshot(self, engine: SimulationEngine) -> Path:
        return self.snapshot_manager.save(engine)

    def finalize(self, summary: Optional[dict] = None) -> None:
        """Write summary.json. Nothing is written without a summary."""
        if summary is None:
            return
        self.summary_path.write_text(
            json.dumps(summary, indent=2, ensure_ascii=False), encoding="utf-8"
        )

    @staticmethod
    def list_runs(base_dir: str | Path) -> list[str]:
        """Names of the run directories under base_dir (those holding a config.json)."""
        return sorted(p.parent.name for p in Path(base_dir).glob(f"*/{CONFIG_FILE}"))

    def __repr__(self) -> str:
        return f"RunManager({self.run_dir})"
