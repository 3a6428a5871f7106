"""
Track Processor Module

Partitions GPS records into per-individual tracks and places them on a
shared uniform time grid for animation.
"""

import logging
from typing import Dict, Tuple, Union
from dataclasses import dataclass
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

IntervalLike = Union[str, pd.Timedelta, np.timedelta64]


def _frozen(values: np.ndarray, dtype) -> np.ndarray:
    arr = np.array(values, dtype=dtype, copy=True)
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True)
class Track:
    """Time-ordered positions of one individual."""
    individual_id: str
    timestamps: np.ndarray  # datetime64[ns], UTC
    lons: np.ndarray
    lats: np.ndarray

    def __post_init__(self):
        if not (len(self.timestamps) == len(self.lons) == len(self.lats)):
            raise ValueError(
                f"Track {self.individual_id}: timestamps, lons and lats differ in length"
            )
        object.__setattr__(self, "timestamps", _frozen(self.timestamps, "datetime64[ns]"))
        object.__setattr__(self, "lons", _frozen(self.lons, np.float64))
        object.__setattr__(self, "lats", _frozen(self.lats, np.float64))

    @property
    def n_points(self) -> int:
        return len(self.timestamps)

    @property
    def start(self) -> np.datetime64:
        return self.timestamps[0]

    @property
    def end(self) -> np.datetime64:
        return self.timestamps[-1]

    @property
    def duration(self) -> pd.Timedelta:
        if self.n_points < 2:
            return pd.Timedelta(0)
        return pd.Timedelta(self.end - self.start)

    @property
    def points(self) -> np.ndarray:
        """Nx2 array of (lon, lat)."""
        return np.column_stack([self.lons, self.lats])


@dataclass(frozen=True)
class ResampledTrack:
    """
    A track reindexed onto a fixed-interval grid.

    Each tick holds the most recent observation at or before it. Ticks
    before the first observation are dropped and counted.
    """
    individual_id: str
    interval: pd.Timedelta
    timestamps: np.ndarray   # grid ticks, datetime64[ns]
    lons: np.ndarray
    lats: np.ndarray
    filled: np.ndarray       # True where the position was carried forward
    observed_at: np.ndarray  # timestamp of the observation used at each tick
    n_leading_dropped: int = 0

    @property
    def n_ticks(self) -> int:
        return len(self.timestamps)

    @property
    def n_filled(self) -> int:
        return int(np.sum(self.filled))

    @property
    def points(self) -> np.ndarray:
        return np.column_stack([self.lons, self.lats])


def partition_tracks(df: pd.DataFrame) -> Dict[str, Track]:
    """
    Group records by individual into timestamp-ordered tracks.

    Equal timestamps keep their input order (stable sort). The mapping is
    ordered by identifier.

    Args:
        df: Canonical record frame from io.load_records

    Returns:
        Mapping individual_id -> Track
    """
    tracks = {}

    for ind_id, group in df.groupby("individual_id", sort=True):
        group = group.sort_values("timestamp", kind="stable")
        tracks[str(ind_id)] = Track(
            individual_id=str(ind_id),
            timestamps=group["timestamp"].values.astype("datetime64[ns]"),
            lons=group["longitude"].values.astype(float),
            lats=group["latitude"].values.astype(float),
        )

    logger.info(
        f"Partitioned {len(df)} records into {len(tracks)} tracks: "
        + ", ".join(f"{k} ({t.n_points})" for k, t in tracks.items())
    )
    return tracks


def to_interval(interval: IntervalLike) -> pd.Timedelta:
    """Parse an interval and require it to be positive."""
    td = pd.Timedelta(interval)
    if td <= pd.Timedelta(0):
        raise ValueError(f"Resample interval must be positive, got {interval!r}")
    return td


def shared_time_bounds(tracks: Dict[str, Track]) -> Tuple[np.datetime64, np.datetime64]:
    """Earliest and latest timestamp across all tracks."""
    non_empty = [t for t in tracks.values() if t.n_points > 0]
    if not non_empty:
        raise ValueError("No observations to bound")
    start = min(t.start for t in non_empty)
    end = max(t.end for t in non_empty)
    return start, end


def time_grid(
    start: np.datetime64,
    end: np.datetime64,
    interval: IntervalLike
) -> np.ndarray:
    """
    Uniform ticks start, start+interval, ... not exceeding end.

    Yields floor((end - start) / interval) + 1 ticks.
    """
    step = to_interval(interval)
    start = np.datetime64(start, "ns")
    end = np.datetime64(end, "ns")
    if end < start:
        raise ValueError(f"Grid end {end} precedes start {start}")

    span = (end - start).astype(np.int64)
    n_ticks = span // step.value + 1
    return start + np.arange(n_ticks, dtype=np.int64) * np.timedelta64(step.value, "ns")


def resample_track(
    track: Track,
    interval: IntervalLike,
    start: np.datetime64,
    end: np.datetime64
) -> ResampledTrack:
    """
    Carry the last known position forward onto a uniform grid.

    No interpolation and no backward fill: ticks earlier than the first
    observation are dropped.

    Args:
        track: Track to resample
        interval: Grid spacing (pandas offset string or Timedelta)
        start, end: Grid bounds, shared across individuals

    Returns:
        ResampledTrack
    """
    step = to_interval(interval)
    grid = time_grid(start, end, step)

    # Index of the latest observation at or before each tick
    idx = np.searchsorted(track.timestamps, grid, side="right") - 1
    defined = idx >= 0
    n_dropped = int(np.sum(~defined))

    grid = grid[defined]
    idx = idx[defined]
    observed_at = track.timestamps[idx]
    filled = observed_at != grid

    if n_dropped:
        logger.debug(
            f"{track.individual_id}: dropped {n_dropped} ticks before first observation"
        )
    logger.debug(
        f"{track.individual_id}: {len(grid)} ticks at {step}, {int(filled.sum())} carried forward"
    )

    return ResampledTrack(
        individual_id=track.individual_id,
        interval=step,
        timestamps=grid,
        lons=track.lons[idx],
        lats=track.lats[idx],
        filled=filled,
        observed_at=observed_at,
        n_leading_dropped=n_dropped,
    )


def resample_tracks(
    tracks: Dict[str, Track],
    interval: IntervalLike
) -> Dict[str, ResampledTrack]:
    """Resample every track onto one grid spanning all observations."""
    start, end = shared_time_bounds(tracks)
    resampled = {
        ind_id: resample_track(track, interval, start, end)
        for ind_id, track in tracks.items()
        if track.n_points > 0
    }
    logger.info(
        f"Resampled {len(resampled)} tracks at {to_interval(interval)} "
        f"over {pd.Timestamp(start)} .. {pd.Timestamp(end)}"
    )
    return resampled
