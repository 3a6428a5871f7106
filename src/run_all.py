#!/usr/bin/env python3
"""
Primate Home Range - Orchestrator

Run the full pipeline on a Movebank GPS export: home ranges, interactive
map, and both trajectory animations.

Usage:
    python src/run_all.py --data data/raw/spider_monkeys.csv
    python src/run_all.py --data data/raw/spider_monkeys.csv --individuals Bob "Da Vinci" --interval 1h
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional
from datetime import datetime

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from primate_tracks.config import Config
from primate_tracks.errors import LoadError, RenderError
from primate_tracks.io import load_records, select_individuals
from primate_tracks.track_processor import partition_tracks, resample_tracks
from home_range.build import estimate_home_ranges
from range_map.build import build_range_map, save_range_map
from trajectory_animation.build import continuous_frames, daily_frames, render_animation

logger = logging.getLogger(__name__)


def _record_error(summary: dict, stage: str, error: Exception, individual: Optional[str] = None) -> None:
    logger.error(f"{stage} failed{f' for {individual}' if individual else ''}: {error}")
    summary["errors"].append({
        "stage": stage,
        "individual": individual,
        "error": str(error)
    })


def run_pipeline(data_path: Path, config: Config) -> dict:
    """
    Run every stage on one data file.

    A LoadError aborts the run. Any other failure is recorded in the
    summary with its stage (and individual where relevant) and the
    remaining stages still run.

    Args:
        data_path: Movebank-style CSV/TSV
        config: Configuration

    Returns:
        Summary dictionary
    """
    summary = {
        "timestamp": datetime.now().isoformat(),
        "data_file": str(data_path),
        "config": config.to_dict(),
        "individuals": {},
        "outputs": {},
        "errors": []
    }

    logger.info(f"{'='*60}")
    logger.info(f"Processing: {data_path}")
    logger.info(f"{'='*60}")

    try:
        records = load_records(data_path, validation=config.validation)
        records = select_individuals(records, config.individuals)
    except LoadError as e:
        _record_error(summary, "load", e)
        return summary

    tracks = partition_tracks(records)
    for ind_id, track in tracks.items():
        summary["individuals"][ind_id] = {
            "n_points": track.n_points,
            "start": str(track.start),
            "end": str(track.end),
        }

    # Home ranges
    logger.info(f"--- Home ranges ({config.home_range_percent:g}% MCP) ---")
    home_ranges, hr_errors = estimate_home_ranges(tracks, config.home_range_percent)
    for ind_id, home_range in home_ranges.items():
        summary["individuals"][ind_id]["home_range"] = home_range.to_dict()
    for ind_id, message in hr_errors.items():
        summary["errors"].append({"stage": "home_range", "individual": ind_id, "error": message})

    # Map
    logger.info("--- Map ---")
    try:
        range_map = build_range_map(tracks, home_ranges, config)
        summary["outputs"]["map"] = str(save_range_map(range_map, config.map_path))
    except RenderError as e:
        _record_error(summary, "map", e)

    # Continuous-time animation
    logger.info(f"--- Animation ({config.resample_interval} grid) ---")
    try:
        resampled = resample_tracks(tracks, config.resample_interval)
        for ind_id, r in resampled.items():
            summary["individuals"][ind_id]["resampled"] = {
                "n_ticks": r.n_ticks,
                "n_filled": r.n_filled,
                "n_leading_dropped": r.n_leading_dropped,
            }
        frames = continuous_frames(resampled, config.max_animation_frames, config.trail_length)
        summary["outputs"]["animation"] = str(render_animation(
            frames, config.animation_path, config, title=" & ".join(tracks)
        ))
    except (RenderError, ValueError) as e:
        _record_error(summary, "animation", e)

    # One frame per day
    logger.info("--- Daily animation ---")
    try:
        frames = daily_frames(tracks)
        summary["outputs"]["daily_animation"] = str(render_animation(
            frames, config.daily_animation_path, config, title=" & ".join(tracks) + " (daily)"
        ))
    except RenderError as e:
        _record_error(summary, "daily_animation", e)

    return summary


def build_config(args: argparse.Namespace) -> Config:
    """Config from --config (if given) with command line overrides."""
    config = Config.from_json(args.config) if args.config else Config()

    if args.output is not None:
        config.output_dir = args.output
    if args.individuals:
        config.individuals = args.individuals
    if args.percent is not None:
        config.home_range_percent = args.percent
    if args.interval is not None:
        config.resample_interval = args.interval
    if args.strict:
        config.validation = "strict"

    # Re-run dataclass checks on overridden values
    return Config(**{**config.to_dict(), "output_dir": config.output_dir})


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="Primate Home Range - MCP home ranges, map and trajectory animations"
    )
    parser.add_argument(
        "--data", "-d",
        type=Path,
        required=True,
        help="Movebank-style GPS export (CSV/TSV)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="JSON config file"
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Output directory"
    )
    parser.add_argument(
        "--individuals", "-i",
        nargs="+",
        default=None,
        help="Individual identifiers to include (default: all)"
    )
    parser.add_argument(
        "--percent", "-p",
        type=float,
        default=None,
        help="Share of fixes enclosed by the MCP"
    )
    parser.add_argument(
        "--interval",
        default=None,
        help="Animation time grid interval (pandas offset, e.g. 1s, 10min, 1h)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on invalid records instead of dropping them"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    args = parser.parse_args(argv)

    # Setup logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        config = build_config(args)
    except (ValueError, TypeError, OSError, json.JSONDecodeError) as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    logger.info(f"Home range: {config.home_range_percent:g}% MCP")
    logger.info(f"Time grid: {config.resample_interval}")
    logger.info(f"Output: {config.output_dir}")

    summary = run_pipeline(args.data, config)

    # Save summary
    summary_path = config.output_dir / "run_summary.json"
    summary_path.parent.mkdir(parents=True, exist_ok=True)
    with open(summary_path, 'w') as f:
        json.dump(summary, f, indent=2)

    logger.info(f"Summary saved to: {summary_path}")

    n_outputs = len(summary["outputs"])
    n_errors = len(summary["errors"])

    logger.info(f"{'='*60}")
    logger.info(f"COMPLETE: {n_outputs} outputs, {n_errors} errors")
    logger.info(f"{'='*60}")

    if n_errors > 0:
        sys.exit(1)


if __name__ == "__main__":
    main()
