"""
Shared modules for the home range pipeline.

Record flow:
- Movebank export -> load_records -> canonical frame (UTC timestamps, lon/lat)
- partition_tracks -> one time-ordered Track per individual
- resample_tracks -> shared time grid, last position carried forward
"""

from .config import Config, DEFAULT_CONFIG
from .errors import (
    TrackingError, LoadError, HomeRangeError,
    InsufficientDataError, DegenerateGeometryError, RenderError,
)
from .coords import CoordinateTransformer, project_to_utm
from .io import load_records, validate_records, select_individuals
from .track_processor import (
    Track, ResampledTrack, partition_tracks,
    shared_time_bounds, time_grid, resample_track, resample_tracks,
)

__all__ = [
    'Config', 'DEFAULT_CONFIG',
    'TrackingError', 'LoadError', 'HomeRangeError',
    'InsufficientDataError', 'DegenerateGeometryError', 'RenderError',
    'CoordinateTransformer', 'project_to_utm',
    'load_records', 'validate_records', 'select_individuals',
    'Track', 'ResampledTrack', 'partition_tracks',
    'shared_time_bounds', 'time_grid', 'resample_track', 'resample_tracks',
]
