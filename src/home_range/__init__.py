"""
Home Range: Minimum Convex Polygon per individual

Keep the given percentage of fixes closest to the centroid, then take
their convex hull. Area is measured in the local UTM zone.
"""

from pathlib import Path

from .build import HomeRange, mcp_polygon, estimate_home_range, estimate_home_ranges, MIN_POINTS

__version__ = "1.0.0"

MODULE_DIR = Path(__file__).parent

__all__ = [
    "HomeRange", "mcp_polygon", "estimate_home_range", "estimate_home_ranges", "MIN_POINTS",
]
