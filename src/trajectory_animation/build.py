"""
Trajectory animation frames and GIF rendering.

Frames are built from the pipeline's tracks; drawing and encoding are
left to matplotlib (FuncAnimation) and its Pillow writer.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.animation import FuncAnimation
from tqdm import tqdm

from primate_tracks.config import Config, DEFAULT_CONFIG
from primate_tracks.errors import RenderError
from primate_tracks.track_processor import Track, ResampledTrack

logger = logging.getLogger(__name__)


@dataclass
class Frame:
    """
    One animation frame.

    positions maps individual -> Nx2 (lon, lat) points visible in the
    frame; the last row is the current position.
    """
    label: str
    positions: Dict[str, np.ndarray] = field(default_factory=dict)


def continuous_frames(
    resampled: Dict[str, ResampledTrack],
    max_frames: int = 300,
    trail_length: Optional[int] = None
) -> List[Frame]:
    """
    One frame per grid tick, labelled with the tick timestamp.

    Ticks are subsampled with a fixed stride when there are more than
    max_frames; the final tick is always kept.

    Args:
        resampled: Resampled tracks sharing one grid
        max_frames: Upper bound on the number of frames
        trail_length: Number of trailing ticks to show (None = whole history)
    """
    if max_frames < 1:
        raise ValueError(f"max_frames must be >= 1, got {max_frames}")

    tracks = [r for r in resampled.values() if r.n_ticks > 0]
    if not tracks:
        return []

    ticks = np.unique(np.concatenate([r.timestamps for r in tracks]))
    stride = max(1, math.ceil(len(ticks) / max_frames))
    selected = ticks[::stride].copy()
    if selected[-1] != ticks[-1]:
        if len(selected) < max_frames:
            selected = np.append(selected, ticks[-1])
        else:
            selected[-1] = ticks[-1]

    # Frames hold views into one (N, 2) array per individual
    points = {r.individual_id: r.points for r in tracks}

    frames = []
    for tick in selected:
        positions = {}
        for r in tracks:
            count = int(np.searchsorted(r.timestamps, tick, side="right"))
            if count == 0:
                continue
            first = 0 if trail_length is None else max(0, count - trail_length)
            positions[r.individual_id] = points[r.individual_id][first:count]
        frames.append(Frame(label=f"{pd.Timestamp(tick):%Y-%m-%d %H:%M:%S}", positions=positions))

    logger.info(f"Built {len(frames)} continuous frames from {len(ticks)} ticks (stride {stride})")
    return frames


def daily_frames(tracks: Dict[str, Track]) -> List[Frame]:
    """One frame per distinct UTC day, labelled YYYY-MM-DD, with that day's fixes."""
    non_empty = [t for t in tracks.values() if t.n_points > 0]
    if not non_empty:
        return []

    days_by_track = {t.individual_id: t.timestamps.astype("datetime64[D]") for t in non_empty}
    all_days = np.unique(np.concatenate(list(days_by_track.values())))

    frames = []
    for day in all_days:
        positions = {}
        for t in non_empty:
            on_day = days_by_track[t.individual_id] == day
            if np.any(on_day):
                positions[t.individual_id] = t.points[on_day]
        frames.append(Frame(label=str(day), positions=positions))

    logger.info(f"Built {len(frames)} daily frames")
    return frames


def _frame_bounds(frames: List[Frame], pad_fraction: float = 0.05) -> Tuple[float, float, float, float]:
    pts = np.vstack([p for f in frames for p in f.positions.values()])
    lon_min, lat_min = pts.min(axis=0)
    lon_max, lat_max = pts.max(axis=0)
    pad_lon = max((lon_max - lon_min) * pad_fraction, 1e-4)
    pad_lat = max((lat_max - lat_min) * pad_fraction, 1e-4)
    return lon_min - pad_lon, lon_max + pad_lon, lat_min - pad_lat, lat_max + pad_lat


def render_animation(
    frames: List[Frame],
    output_path: Path,
    config: Config = DEFAULT_CONFIG,
    title: str = "Trajectories"
) -> Path:
    """
    Render frames and encode them as an animated GIF.

    Args:
        frames: Frames from continuous_frames or daily_frames
        output_path: Target .gif path
        config: fps, dpi and colors
        title: Axes title

    Returns:
        output_path

    Raises:
        RenderError: no frames, unwritable path, or encoder failure
    """
    output_path = Path(output_path)
    if not frames or not any(f.positions for f in frames):
        raise RenderError(f"No frames to render for {output_path.name}")

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise RenderError(f"Cannot create output directory for {output_path}: {e}") from e

    individuals = sorted({ind for f in frames for ind in f.positions})
    lon_min, lon_max, lat_min, lat_max = _frame_bounds(frames)
    mid_lat = (lat_min + lat_max) / 2.0

    fig, ax = plt.subplots(figsize=(8, 8))
    try:
        ax.set_xlim(lon_min, lon_max)
        ax.set_ylim(lat_min, lat_max)
        ax.set_aspect(1.0 / max(math.cos(math.radians(mid_lat)), 1e-6), adjustable="datalim")
        ax.set_xlabel("Longitude")
        ax.set_ylabel("Latitude")
        ax.set_title(title, fontsize=14, fontweight="bold")
        ax.grid(True, alpha=0.3)

        trails = {}
        heads = {}
        for i, ind in enumerate(individuals):
            color = config.color_for(ind, i)
            trails[ind], = ax.plot([], [], "-o", color=color, markersize=2, linewidth=1, alpha=0.5)
            heads[ind], = ax.plot([], [], "o", color=color, markersize=9,
                                  markeredgecolor="black", label=ind)
        ax.legend(loc="upper right", title="Individual", framealpha=0.9)
        time_text = ax.text(0.02, 0.97, "", transform=ax.transAxes, va="top", fontsize=11,
                            bbox=dict(boxstyle="round", facecolor="white", alpha=0.8))

        def update(i):
            frame = frames[i]
            for ind in individuals:
                pts = frame.positions.get(ind)
                if pts is None or len(pts) == 0:
                    trails[ind].set_data([], [])
                    heads[ind].set_data([], [])
                else:
                    trails[ind].set_data(pts[:, 0], pts[:, 1])
                    heads[ind].set_data([pts[-1, 0]], [pts[-1, 1]])
            time_text.set_text(frame.label)
            return list(trails.values()) + list(heads.values()) + [time_text]

        animation = FuncAnimation(
            fig, update, frames=len(frames),
            interval=1000 / config.animation_fps, blit=False, repeat=False
        )

        with tqdm(total=len(frames), desc=f"Encoding {output_path.name}", unit="frame") as pbar:
            animation.save(
                str(output_path), writer="pillow",
                fps=config.animation_fps, dpi=config.animation_dpi,
                progress_callback=lambda i, n: pbar.update(1)
            )
    except (OSError, ValueError, RuntimeError) as e:
        raise RenderError(f"Could not render {output_path}: {e}") from e
    finally:
        plt.close(fig)

    logger.info(f"Saved animation: {output_path} ({len(frames)} frames)")
    return output_path
