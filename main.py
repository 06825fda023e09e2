"""
Snake Arena - headless CLI entry point

Usage:
    python main.py
    python main.py --config config/arena.json --seconds 120 --players 4
    python main.py --seed 7 --fps 30 --output runs --verbose
"""

import argparse
import logging
import sys
import time


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Snake Arena - run the simulation core headless with autopilot players",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                   Default 60 s session, 2 autopilot players
  python main.py --config config/arena.json        Load tuning from JSON
  python main.py --seconds 300 --players 4         Longer session, all slots in use
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to JSON config file (default: built-in defaults)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Override random seed (overrides config value)",
    )
    parser.add_argument(
        "--seconds",
        type=float,
        default=60.0,
        help="Simulated session length in seconds (default: 60)",
    )
    parser.add_argument(
        "--fps",
        type=float,
        default=60.0,
        help="Frames per simulated second (default: 60)",
    )
    parser.add_argument(
        "--players",
        type=int,
        default=2,
        help="Number of player slots driven by the autopilot (default: 2)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Override output directory",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log joins, losses and eliminations",
    )

    return parser.parse_args()


def run_session(config_path: str | None = None, seed_override: int | None = None,
                seconds: float = 60.0, fps: float = 60.0, autopilot_players: int = 2,
                output_dir: str | None = None) -> None:
    """Run one headless session and write its run directory."""
    import numpy as np

    from snake_arena.core.config import get_default_config, load_config
    from snake_arena.logging.run_manager import RunManager
    from snake_arena.simulation.engine import SimulationEngine
    from snake_arena.simulation.headless import Autopilot, HeadlessPresentation

    config = load_config(config_path) if config_path else get_default_config()
    if seed_override is not None:
        config.arena.seed = seed_override

    slots = config.players.max_players
    if not (0 <= autopilot_players <= slots):
        print(f"Error: --players must be between 0 and {slots}")
        sys.exit(1)

    out_dir = output_dir or config.output.output_dir

    print("[Snake Arena] Headless session")
    print(f"  Config: {config_path or 'defaults'}")
    print(f"  Arena: {config.arena.viewport_width:.0f}x{config.arena.viewport_height:.0f}")
    print(f"  Autopilot players: {autopilot_players}/{slots}")
    print(f"  Seed: {config.arena.seed}")
    print(f"  Duration: {seconds:.1f}s at {fps:.0f} fps")
    print(f"  Output: {out_dir}")
    print()

    presentation = HeadlessPresentation.from_config(config)
    engine = SimulationEngine(config, presentation, seed=config.arena.seed)
    controls = [tuple(pair) for pair in config.players.controls[:autopilot_players]]
    autopilot = Autopilot(presentation, controls, np.random.default_rng(config.arena.seed + 1))
    run_manager = RunManager(config, base_dir=out_dir)

    def on_tick(tick: int, eng: SimulationEngine) -> None:
        if config.output.log_every_tick:
            run_manager.log_tick(tick, eng.elapsed, eng.tick_stats)
        if eng.tick_stats.players_eliminated:
            for record in eng.eliminations[-eng.tick_stats.players_eliminated:]:
                print(f"  t={record.elapsed:7.1f}s | Player {record.player} | {record.score:5d} points")
        presentation.end_frame()
        autopilot.step()

    engine.on_tick = on_tick

    autopilot.step()
    start_time = time.time()
    result = engine.run(seconds, frame_delta=1.0 / fps)
    wall = time.time() - start_time

    if config.output.snapshot_on_finish:
        run_manager.save_snapshot(engine)

    print()
    print("[Result]")
    print(f"  Ticks: {result.total_ticks}")
    print(f"  Eliminations: {len(result.eliminations)}")
    print(f"  Best score: {result.best_score}")
    print(f"  Obstacles created: {result.obstacles_created}")
    print(f"  Pills eaten: {result.pills_eaten}")
    print(f"  Bounces: {result.bounces}")
    print(f"  Elapsed: {wall:.1f}s")

    summary = {
        "total_ticks": result.total_ticks,
        "simulated_seconds": round(result.elapsed, 3),
        "seed": result.seed,
        "eliminations": [
            {"player": e.player, "score": e.score, "trail_length": e.trail_length,
             "elapsed": round(e.elapsed, 3)}
            for e in result.eliminations
        ],
        "best_score": result.best_score,
        "obstacles_created": result.obstacles_created,
        "pills_eaten": result.pills_eaten,
        "bounces": result.bounces,
        "autopilot_presses": autopilot.presses,
        "elapsed_seconds": round(wall, 2),
    }
    run_manager.finalize(summary)
    print(f"  Output saved to: {run_manager.run_dir}")


def main() -> None:
    args = parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    if args.fps <= 0 or args.seconds <= 0:
        print("Error: --fps and --seconds must be positive.")
        sys.exit(1)

    run_session(
        args.config,
        seed_override=args.seed,
        seconds=args.seconds,
        fps=args.fps,
        autopilot_players=args.players,
        output_dir=args.output,
    )


if __name__ == "__main__":
    main()
