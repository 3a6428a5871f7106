"""
Exceptions raised by the tracking pipeline.

Every stage raises one of these; the orchestrator decides whether the
failure aborts the run (LoadError) or only the affected individual/section.
"""

from typing import Optional


class TrackingError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, individual_id: Optional[str] = None):
        super().__init__(message)
        self.individual_id = individual_id


class LoadError(TrackingError):
    """Input file is missing, malformed, or lacks required columns."""


class HomeRangeError(TrackingError):
    """Home range cannot be estimated for an individual."""


class InsufficientDataError(HomeRangeError):
    """Too few points for a valid polygon."""


class DegenerateGeometryError(HomeRangeError):
    """Points are collinear or coincident, so the hull has no area."""


class RenderError(TrackingError):
    """Map or animation output could not be produced."""
