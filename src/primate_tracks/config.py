"""
Configuration and constants for the home range pipeline.

Column contract (Movebank export):
- timestamp, location-long, location-lat, individual-local-identifier
- Renamed on load to: timestamp, longitude, latitude, individual_id
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
import json
from pathlib import Path

import pandas as pd


# Movebank column -> canonical column
COLUMN_MAP = {
    "timestamp": "timestamp",
    "location-long": "longitude",
    "location-lat": "latitude",
    "individual-local-identifier": "individual_id",
}

CANONICAL_COLUMNS = list(COLUMN_MAP.values())

VALIDATION_POLICIES = ("drop", "strict")

# Colors assigned in sorted-identifier order when an individual has no entry
DEFAULT_PALETTE = [
    "#e6550d",  # orange
    "#3182bd",  # blue
    "#31a354",  # green
    "#756bb1",  # purple
    "#de2d26",  # red
    "#636363",  # grey
]


@dataclass
class Config:
    """
    Global configuration for one pipeline run.

    resample_interval is any pandas offset string ("1s", "10min", "1h").
    individuals=None means every identifier found in the input.
    """

    # Selection
    individuals: Optional[List[str]] = None
    validation: str = "drop"

    # Home range
    home_range_percent: float = 95.0

    # Time grid
    resample_interval: str = "10min"

    # Animation
    max_animation_frames: int = 300
    animation_fps: int = 10
    animation_dpi: int = 100
    trail_length: Optional[int] = None  # None keeps the full trail

    # Map
    map_zoom: int = 15
    map_tiles: str = "OpenStreetMap"
    colors: Dict[str, str] = field(default_factory=lambda: {
        "Bob": "#e6550d",
        "Da Vinci": "#3182bd",
    })

    # Outputs
    output_dir: Path = field(default_factory=lambda: Path("outputs"))
    map_filename: str = "home_range_map.html"
    animation_filename: str = "bob_davinci_trajectory.gif"
    daily_animation_filename: str = "bob_davinci_trajectory_daily.gif"

    def __post_init__(self):
        if self.validation not in VALIDATION_POLICIES:
            raise ValueError(
                f"validation must be one of {VALIDATION_POLICIES}, got {self.validation!r}"
            )
        if not 0 < self.home_range_percent <= 100:
            raise ValueError(f"home_range_percent must be in (0, 100], got {self.home_range_percent}")
        if pd.Timedelta(self.resample_interval) <= pd.Timedelta(0):
            raise ValueError(f"resample_interval must be positive, got {self.resample_interval!r}")
        if self.max_animation_frames < 1:
            raise ValueError(f"max_animation_frames must be >= 1, got {self.max_animation_frames}")
        self.output_dir = Path(self.output_dir)

    def color_for(self, individual_id: str, index: int = 0) -> str:
        """Color for an individual, falling back to the palette by position."""
        if individual_id in self.colors:
            return self.colors[individual_id]
        return DEFAULT_PALETTE[index % len(DEFAULT_PALETTE)]

    @property
    def map_path(self) -> Path:
        return self.output_dir / self.map_filename

    @property
    def animation_path(self) -> Path:
        return self.output_dir / self.animation_filename

    @property
    def daily_animation_path(self) -> Path:
        return self.output_dir / self.daily_animation_filename

    def to_dict(self) -> Dict[str, Any]:
        return {
            "individuals": self.individuals,
            "validation": self.validation,
            "home_range_percent": self.home_range_percent,
            "resample_interval": self.resample_interval,
            "max_animation_frames": self.max_animation_frames,
            "animation_fps": self.animation_fps,
            "animation_dpi": self.animation_dpi,
            "trail_length": self.trail_length,
            "map_zoom": self.map_zoom,
            "map_tiles": self.map_tiles,
            "colors": dict(self.colors),
            "output_dir": str(self.output_dir),
            "map_filename": self.map_filename,
            "animation_filename": self.animation_filename,
            "daily_animation_filename": self.daily_animation_filename,
        }

    @classmethod
    def from_json(cls, path: Path) -> "Config":
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        data["output_dir"] = Path(data.get("output_dir", "outputs"))
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Global default config
DEFAULT_CONFIG = Config()
