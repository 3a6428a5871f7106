"""
Trajectory Animation: animated GIFs of movement over time

Two framing policies:
- continuous: one frame per resampled grid tick, trail up to the tick
- daily: one frame per calendar day, fixes observed that day
"""

from pathlib import Path

from .build import Frame, continuous_frames, daily_frames, render_animation

__version__ = "1.0.0"

MODULE_DIR = Path(__file__).parent
