from __future__ import annotations

from datetime import datetime

import pytest

from prodgrid.core.errors import LayoutConfigError
from prodgrid.timeline.clock import initial_scroll_offset, marker_offset, now_in_zone


def test_marker_offset_follows_time_of_day():
    assert marker_offset(datetime(2024, 1, 25, 0, 0), 80) == 0
    assert marker_offset(datetime(2024, 1, 25, 6, 30), 80) == pytest.approx(520)
    assert marker_offset(datetime(2024, 1, 25, 23, 59, 59), 80) <= 24 * 80


def test_initial_scroll_keeps_context_above_marker():
    assert initial_scroll_offset(datetime(2024, 1, 25, 1, 0), 80) == 0
    assert initial_scroll_offset(datetime(2024, 1, 25, 10, 0), 80) == pytest.approx(600)
    assert initial_scroll_offset(datetime(2024, 1, 25, 10, 0), 80, margin_px=0) == pytest.approx(800)


def test_marker_offset_rejects_bad_scale():
    with pytest.raises(LayoutConfigError):
        marker_offset(datetime(2024, 1, 25, 10, 0), 0)


def test_now_in_zone_is_aware():
    moment = now_in_zone("UTC")
    assert moment.tzinfo is not None
    assert moment.utcoffset().total_seconds() == 0
