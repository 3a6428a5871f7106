"""
Interactive home range map.

Layers:
- Base tiles (config.map_tiles)
- One FeatureGroup of CircleMarkers per individual, colored per config
- One FeatureGroup with the MCP polygons
- LayerControl to toggle them

The map is centered on the median fix at config.map_zoom.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
import folium

from primate_tracks.config import Config, DEFAULT_CONFIG
from primate_tracks.errors import RenderError
from primate_tracks.track_processor import Track
from home_range.build import HomeRange

logger = logging.getLogger(__name__)


def map_center(tracks: Dict[str, Track]) -> Tuple[float, float]:
    """Median (lat, lon) over all fixes."""
    lons = np.concatenate([t.lons for t in tracks.values()]) if tracks else np.empty(0)
    lats = np.concatenate([t.lats for t in tracks.values()]) if tracks else np.empty(0)
    if len(lons) == 0:
        raise RenderError("No fixes to place on the map")
    return float(np.median(lats)), float(np.median(lons))


def _points_layer(track: Track, color: str) -> folium.FeatureGroup:
    layer = folium.FeatureGroup(name=track.individual_id)
    for ts, lon, lat in zip(track.timestamps, track.lons, track.lats):
        folium.CircleMarker(
            location=[float(lat), float(lon)],
            radius=3,
            color=color,
            fill=True,
            fill_color=color,
            fill_opacity=0.6,
            weight=1,
            tooltip=f"{track.individual_id} {pd.Timestamp(ts):%Y-%m-%d %H:%M:%S}",
        ).add_to(layer)
    return layer


def _home_range_layer(
    home_ranges: Dict[str, HomeRange],
    colors: Dict[str, str],
    percent: float
) -> folium.FeatureGroup:
    layer = folium.FeatureGroup(name=f"Home ranges ({percent:g}% MCP)")
    for ind_id, home_range in home_ranges.items():
        color = colors[ind_id]
        folium.Polygon(
            locations=[(lat, lon) for lon, lat in home_range.vertices],
            color=color,
            weight=2,
            fill=True,
            fill_color=color,
            fill_opacity=0.15,
            tooltip=f"{ind_id}: {home_range.area_km2:.3f} km²",
        ).add_to(layer)
    return layer


def build_range_map(
    tracks: Dict[str, Track],
    home_ranges: Optional[Dict[str, HomeRange]] = None,
    config: Config = DEFAULT_CONFIG
) -> folium.Map:
    """
    Compose the interactive map.

    Args:
        tracks: Tracks by individual
        home_ranges: MCP polygons by individual (individuals without one
            are shown as points only)
        config: Zoom, tiles and colors

    Returns:
        folium.Map with a LayerControl

    Raises:
        RenderError: no fixes to show
    """
    home_ranges = home_ranges or {}
    center = map_center(tracks)

    m = folium.Map(
        location=list(center),
        zoom_start=config.map_zoom,
        tiles=config.map_tiles,
        control_scale=True,
    )

    colors = {
        ind_id: config.color_for(ind_id, i)
        for i, ind_id in enumerate(sorted(set(tracks) | set(home_ranges)))
    }

    for ind_id, track in tracks.items():
        _points_layer(track, colors[ind_id]).add_to(m)

    if home_ranges:
        percent = next(iter(home_ranges.values())).percent
        _home_range_layer(home_ranges, colors, percent).add_to(m)

    folium.LayerControl(collapsed=False).add_to(m)

    logger.info(
        f"Composed map at ({center[0]:.5f}, {center[1]:.5f}) zoom {config.map_zoom}: "
        f"{len(tracks)} point layers, {len(home_ranges)} home ranges"
    )
    return m


def save_range_map(m: folium.Map, path: Path) -> Path:
    """Write the map as standalone HTML."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        m.save(str(path))
    except OSError as e:
        raise RenderError(f"Could not write map to {path}: {e}") from e

    logger.info(f"Saved map: {path}")
    return path
