"""Wall-clock helpers for the current-time marker, independent of block layout."""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from prodgrid.timeline.layout import column_height

__all__ = ["DEFAULT_ZONE", "now_in_zone", "marker_offset", "initial_scroll_offset"]

DEFAULT_ZONE = "America/Santiago"


def now_in_zone(zone: str = DEFAULT_ZONE) -> datetime:
    """Current plant-local time; callers poll this on a fixed interval (e.g. every minute)."""
    return datetime.now(ZoneInfo(zone))


def marker_offset(moment: datetime, pixels_per_hour: float) -> float:
    """Pixel offset of ``moment``'s time of day within a 24-hour column."""
    bound = column_height(pixels_per_hour)
    hours = moment.hour + moment.minute / 60 + moment.second / 3600
    return min(hours * pixels_per_hour, bound)


def initial_scroll_offset(moment: datetime, pixels_per_hour: float, margin_px: float = 200.0) -> float:
    """Scroll position that brings the marker into view with ``margin_px`` of context above it."""
    return max(0.0, marker_offset(moment, pixels_per_hour) - margin_px)
