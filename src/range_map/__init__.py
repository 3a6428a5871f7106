"""
Range Map: interactive folium map of fixes and home ranges

One toggleable layer per individual plus one layer holding every
home range polygon.
"""

from pathlib import Path

from .build import build_range_map, save_range_map, map_center

__version__ = "1.0.0"

MODULE_DIR = Path(__file__).parent
