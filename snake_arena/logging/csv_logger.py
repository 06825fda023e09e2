"""
Per-tick CSV log for the Snake Arena simulation core.

Each row holds the tick number, simulated time and every TickStats counter.
Rows are appended as the engine runs; the header goes in when the file is
new or empty, so a log can be reopened and continued.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import IO, Iterable, Optional

from snake_arena.simulation.engine import TickStats


def tick_columns() -> list[str]:
    """Default column order: tick, elapsed, then every TickStats counter."""
    return ["tick", "elapsed"] + TickStats.names()


def _parse_row(row: dict[str, str]) -> dict:
    parsed: dict = {}
    for key, value in row.items():
        if key == "elapsed":
            parsed[key] = float(value)
        elif key == "tick" or key in TickStats.names():
            parsed[key] = int(value)
        else:
            parsed[key] = value
    return parsed


class CSVLogger:
    """
    Appends tick counters to a CSV file.

    Usage:
        log = CSVLogger("runs/my_run/ticks.csv")
        log.log_tick(engine.tick_count, engine.elapsed, engine.tick_stats)
        rows = log.read_back(typed=True)

    Attributes:
        file_path: Target CSV file.
        columns: Column order; extra keys in a row are dropped.
        rows_written: Rows appended through this instance.
    """

    def __init__(self, file_path: str | Path, columns: Optional[list[str]] = None):
        self.file_path = Path(file_path)
        self.columns = list(columns) if columns else tick_columns()
        self.rows_written = 0
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def _open(self, mode: str) -> IO[str]:
        return open(self.file_path, mode, newline="", encoding="utf-8")

    def _writer(self, f: IO[str]) -> csv.DictWriter:
        return csv.DictWriter(f, fieldnames=self.columns, extrasaction="ignore")

    def _is_empty(self) -> bool:
        return not self.file_path.exists() or self.file_path.stat().st_size == 0

    def log_row(self, row: dict) -> None:
        """Append one row, writing the header first if the file is empty."""
        fresh = self._is_empty()
        with self._open("a") as f:
            writer = self._writer(f)
            if fresh:
                writer.writeheader()
            writer.writerow(row)
        self.rows_written += 1

    def log_tick(self, tick: int, elapsed: float, stats: TickStats) -> None:
        row = {"tick": tick, "elapsed": round(elapsed, 6)}
        row.update(stats.to_dict())
        self.log_row(row)

    def log_all(self, rows: Iterable[dict]) -> None:
        """Replace the file contents with `rows`."""
        rows = list(rows)
        with self._open("w") as f:
            writer = self._writer(f)
            writer.writeheader()
            writer.writerows(rows)
        self.rows_written = len(rows)

    def read_back(self, typed: bool = False) -> list[dict]:
        """
        Read every row back.

        Args:
            typed: Convert tick and counters to int and elapsed to float.
                Otherwise values stay strings, as the csv module returns them.
        """
        if self._is_empty():
            return []
        with self._open("r") as f:
            rows = list(csv.DictReader(f))
        if typed:
            return [_parse_row(r) for r in rows]
        return rows
