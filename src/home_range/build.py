"""
Minimum Convex Polygon (MCP) home range estimation.

Algorithm:
1. Centroid of all fixes (mean lon/lat)
2. Rank fixes by distance to the centroid, longitude scaled by cos(lat)
3. Keep the closest `percent`% (never fewer than MIN_POINTS)
4. Convex hull of the kept fixes (shapely)
5. Area in km^2 after projecting the hull to the local UTM zone

The hull itself is a library call; this module only selects the points
and checks that the result is a real polygon.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from shapely.geometry import MultiPoint, Polygon
from shapely.ops import transform as transform_geometry

from primate_tracks.coords import CoordinateTransformer
from primate_tracks.errors import InsufficientDataError, DegenerateGeometryError, HomeRangeError
from primate_tracks.track_processor import Track

logger = logging.getLogger(__name__)

# A polygon needs three non-collinear vertices
MIN_POINTS = 3

DEFAULT_PERCENT = 95.0


@dataclass
class HomeRange:
    """MCP home range of one individual."""
    individual_id: str
    percent: float
    polygon: Polygon  # (lon, lat)
    n_points: int
    n_used: int
    area_km2: float

    @property
    def vertices(self) -> List[Tuple[float, float]]:
        """Closed exterior ring as (lon, lat) tuples."""
        return [(float(x), float(y)) for x, y in self.polygon.exterior.coords]

    def to_dict(self) -> Dict[str, object]:
        return {
            "individual_id": self.individual_id,
            "percent": self.percent,
            "n_points": self.n_points,
            "n_used": self.n_used,
            "area_km2": round(self.area_km2, 4),
            "vertices": self.vertices,
        }


def n_points_kept(n_points: int, percent: float) -> int:
    """Number of fixes enclosed at a confidence level, floored, at least MIN_POINTS."""
    n_keep = int(np.floor(n_points * percent / 100.0 + 1e-9))
    return min(n_points, max(MIN_POINTS, n_keep))


def mcp_polygon(
    lons: np.ndarray,
    lats: np.ndarray,
    percent: float = DEFAULT_PERCENT,
    individual_id: Optional[str] = None
) -> Polygon:
    """
    Convex hull around the `percent`% of fixes nearest the centroid.

    Args:
        lons: Longitude array (degrees)
        lats: Latitude array (degrees)
        percent: Share of fixes to enclose, in (0, 100]
        individual_id: Only used in error messages

    Returns:
        shapely Polygon in (lon, lat)

    Raises:
        InsufficientDataError: fewer than MIN_POINTS fixes
        DegenerateGeometryError: kept fixes are collinear or coincident
    """
    if not 0 < percent <= 100:
        raise ValueError(f"percent must be in (0, 100], got {percent}")

    points = np.column_stack([
        np.asarray(lons, dtype=np.float64),
        np.asarray(lats, dtype=np.float64),
    ])
    if not np.all(np.isfinite(points)):
        raise ValueError("Coordinates must be finite")

    label = individual_id or "points"
    if len(points) < MIN_POINTS:
        raise InsufficientDataError(
            f"{label}: {len(points)} fixes, at least {MIN_POINTS} required",
            individual_id=individual_id,
        )

    centroid = points.mean(axis=0)
    scale = np.array([np.cos(np.radians(centroid[1])), 1.0])
    dists = np.linalg.norm((points - centroid) * scale, axis=1)

    n_keep = n_points_kept(len(points), percent)
    keep_idx = np.argsort(dists, kind="stable")[:n_keep]
    kept = points[keep_idx]

    hull = MultiPoint([tuple(p) for p in kept]).convex_hull
    if not isinstance(hull, Polygon) or hull.is_empty or hull.area <= 0:
        raise DegenerateGeometryError(
            f"{label}: {n_keep} fixes are collinear or coincident ({hull.geom_type})",
            individual_id=individual_id,
        )

    return hull


def polygon_area_km2(polygon: Polygon) -> float:
    """Area of a lon/lat polygon, projected to the UTM zone of its centroid."""
    xs, ys = polygon.exterior.coords.xy
    transformer = CoordinateTransformer.for_points(np.asarray(xs), np.asarray(ys))
    projected = transform_geometry(transformer.transformer.transform, polygon)
    return float(projected.area) / 1e6


def estimate_home_range(track: Track, percent: float = DEFAULT_PERCENT) -> HomeRange:
    """MCP home range for one track."""
    polygon = mcp_polygon(track.lons, track.lats, percent, individual_id=track.individual_id)
    home_range = HomeRange(
        individual_id=track.individual_id,
        percent=percent,
        polygon=polygon,
        n_points=track.n_points,
        n_used=n_points_kept(track.n_points, percent),
        area_km2=polygon_area_km2(polygon),
    )
    logger.info(
        f"{track.individual_id}: MCP {percent:g}% = {home_range.area_km2:.3f} km^2 "
        f"({home_range.n_used}/{home_range.n_points} fixes)"
    )
    return home_range


def estimate_home_ranges(
    tracks: Dict[str, Track],
    percent: float = DEFAULT_PERCENT
) -> Tuple[Dict[str, HomeRange], Dict[str, str]]:
    """
    Estimate home ranges for all tracks.

    A failure for one individual does not stop the others.

    Returns:
        (home ranges by individual, error message by individual)
    """
    ranges = {}
    errors = {}

    for ind_id, track in tracks.items():
        try:
            ranges[ind_id] = estimate_home_range(track, percent)
        except HomeRangeError as e:
            logger.error(f"Home range failed for {ind_id}: {e}")
            errors[ind_id] = str(e)

    return ranges, errors
