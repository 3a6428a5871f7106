"""
Coordinate transformation utilities.

GPS fixes stay in lon/lat (EPSG:4326) everywhere except area measurement,
which projects to the UTM zone containing the points.
"""

import numpy as np
from typing import Tuple
from dataclasses import dataclass
import logging

from pyproj import Transformer, CRS

logger = logging.getLogger(__name__)


@dataclass
class UTMCoordinates:
    """UTM coordinates in meters."""
    x_m: np.ndarray  # Easting in meters
    y_m: np.ndarray  # Northing in meters
    zone: int
    hemisphere: str


def utm_zone_for(lon: float, lat: float) -> Tuple[int, str]:
    """UTM zone number and hemisphere ('N'/'S') containing a coordinate."""
    zone = int((lon + 180.0) // 6.0) + 1
    zone = min(max(zone, 1), 60)
    hemisphere = "N" if lat >= 0 else "S"
    return zone, hemisphere


class CoordinateTransformer:
    """Transform GPS coordinates to UTM (meters)."""

    def __init__(self, utm_zone: int, hemisphere: str = "N"):
        """
        Initialize transformer.

        Args:
            utm_zone: UTM zone number (1-60)
            hemisphere: 'N' or 'S'
        """
        if not 1 <= utm_zone <= 60:
            raise ValueError(f"UTM zone must be in 1..60, got {utm_zone}")
        if hemisphere not in ("N", "S"):
            raise ValueError(f"hemisphere must be 'N' or 'S', got {hemisphere!r}")

        self.utm_zone = utm_zone
        self.hemisphere = hemisphere

        # WGS84 to UTM
        self.crs_wgs84 = CRS.from_epsg(4326)
        self.epsg_utm = 32600 + utm_zone if hemisphere == "N" else 32700 + utm_zone
        self.crs_utm = CRS.from_epsg(self.epsg_utm)
        self.transformer = Transformer.from_crs(
            self.crs_wgs84, self.crs_utm, always_xy=True
        )
        logger.debug(f"Using UTM Zone {utm_zone}{hemisphere} (EPSG:{self.epsg_utm})")

    def to_utm(
        self,
        lon: np.ndarray,
        lat: np.ndarray
    ) -> UTMCoordinates:
        """
        Transform longitude/latitude to UTM coordinates in meters.

        Args:
            lon: Longitude array (degrees)
            lat: Latitude array (degrees)

        Returns:
            UTMCoordinates with x_m, y_m in meters
        """
        lon = np.asarray(lon, dtype=np.float64)
        lat = np.asarray(lat, dtype=np.float64)

        x_m, y_m = self.transformer.transform(lon, lat)

        return UTMCoordinates(
            x_m=np.asarray(x_m, dtype=np.float64),
            y_m=np.asarray(y_m, dtype=np.float64),
            zone=self.utm_zone,
            hemisphere=self.hemisphere
        )

    @classmethod
    def for_points(cls, lon: np.ndarray, lat: np.ndarray) -> "CoordinateTransformer":
        """Create transformer for the zone containing the median point."""
        zone, hemisphere = utm_zone_for(float(np.median(lon)), float(np.median(lat)))
        return cls(utm_zone=zone, hemisphere=hemisphere)


def project_to_utm(
    lon: np.ndarray,
    lat: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convenience function to project GPS to UTM meters.

    The zone is chosen from the median point.

    Returns:
        Tuple of (x_meters, y_meters)
    """
    transformer = CoordinateTransformer.for_points(lon, lat)
    utm = transformer.to_utm(lon, lat)
    return utm.x_m, utm.y_m
