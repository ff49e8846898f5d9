"""Vertical layout of one calendar column (one machine/day pair)."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Union

from prodgrid.core.errors import LayoutConfigError
from prodgrid.schedule.blocks import Block
from prodgrid.timeline.days import DayFragment

__all__ = [
    "MINUTES_PER_DAY",
    "LayoutConfig",
    "PositionedBlock",
    "column_height",
    "layout",
]

MINUTES_PER_DAY = 24 * 60

ColumnEntry = Union[Block, DayFragment]


class _Timed(Protocol):
    start_time: datetime
    end_time: datetime


@dataclass(frozen=True, slots=True)
class LayoutConfig:
    """Pixel constants applied when stacking blocks inside a column.

    Attributes
    ----------
    gap_px:
        Visible separation inserted between consecutive blocks.
    min_height_px:
        Smallest rendered height, so very short blocks stay legible.
    adjacency_tolerance_px:
        Distance under which a block is considered to start where the previous one ends.
    """

    gap_px: float = 2.0
    min_height_px: float = 40.0
    adjacency_tolerance_px: float = 1.0

    def __post_init__(self) -> None:
        if self.gap_px < 0 or self.min_height_px < 0 or self.adjacency_tolerance_px < 0:
            raise LayoutConfigError("LayoutConfig values must be non-negative")


@dataclass(frozen=True, slots=True)
class PositionedBlock:
    """Column entry with its pixel placement. Recomputed on every layout pass."""

    entry: ColumnEntry
    top_offset: float
    rendered_height: float
    is_last_in_column: bool = False

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def bottom(self) -> float:
        return self.top_offset + self.rendered_height


def column_height(pixels_per_hour: float) -> float:
    if pixels_per_hour <= 0:
        raise LayoutConfigError(f"pixels_per_hour must be positive (got {pixels_per_hour})")
    return 24 * pixels_per_hour


def _minutes_from(column_day_start: datetime, moment: datetime) -> float:
    minutes = (moment - column_day_start).total_seconds() / 60
    return min(max(minutes, 0.0), float(MINUTES_PER_DAY))


def layout(
    blocks: Sequence[_Timed],
    column_day_start: datetime,
    pixels_per_hour: float,
    config: LayoutConfig | None = None,
) -> list[PositionedBlock]:
    """Place column entries so they never overlap and stay inside the 24-hour bound.

    Parameters
    ----------
    blocks:
        Blocks or day fragments already restricted to this column. Overlapping input is
        not rejected; it is stacked like any other sequence.
    column_day_start:
        Midnight of the column's day; offsets are measured from here and clamped to
        ``[0, 24h]``.
    pixels_per_hour:
        Vertical scale. Must be positive.
    config:
        Gap/minimum-height constants (defaults to :class:`LayoutConfig`).

    Notes
    -----
    Entries are sorted by start time (stable, so ties keep input order). A block whose
    raw top sits within the adjacency tolerance of the previous block's raw end is pushed
    down by one gap; every top is also kept at least one gap below the previous rendered
    bottom. Heights run from the top to the raw end, lose one gap unless the entry is the
    column's last, are raised to the minimum height and are finally truncated at the bound.
    """
    cfg = config or LayoutConfig()
    bound = column_height(pixels_per_hour)
    ordered = sorted(blocks, key=lambda entry: entry.start_time)
    last_index = len(ordered) - 1

    positioned: list[PositionedBlock] = []
    prev_raw_end: float | None = None
    prev_bottom = 0.0
    for index, entry in enumerate(ordered):
        start_minutes = _minutes_from(column_day_start, entry.start_time)
        end_minutes = max(_minutes_from(column_day_start, entry.end_time), start_minutes)
        raw_top = start_minutes / 60 * pixels_per_hour
        raw_end = min(end_minutes / 60 * pixels_per_hour, bound)

        top = raw_top
        if prev_raw_end is not None:
            if abs(raw_top - prev_raw_end) < cfg.adjacency_tolerance_px:
                top = raw_top + cfg.gap_px
            top = max(top, prev_bottom + cfg.gap_px)
        top = min(top, bound)
        room = bound - top

        height = raw_end - top
        if index < last_index:
            height -= cfg.gap_px
        height = min(max(height, cfg.min_height_px), room)

        item = PositionedBlock(
            entry=entry,  # type: ignore[arg-type]
            top_offset=top,
            rendered_height=height,
            is_last_in_column=index == last_index,
        )
        positioned.append(item)
        prev_raw_end = raw_end
        prev_bottom = item.bottom
    return positioned
