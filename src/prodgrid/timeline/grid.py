"""Compose normalised blocks into laid-out calendar columns."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING

from prodgrid.schedule.blocks import Block
from prodgrid.timeline.days import blocks_tzinfo, day_starts, fragments_for_day, start_of_day
from prodgrid.timeline.layout import PositionedBlock, layout
from prodgrid.timeline.visibility import ViewMode, select_visible, view_window, visible_machines

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from prodgrid.config import ViewSettings

__all__ = ["ViewParams", "Column", "daily_columns", "weekly_columns", "build_view"]


@dataclass(frozen=True, slots=True)
class ViewParams:
    """What the calendar is currently showing.

    Attributes
    ----------
    day:
        Visible date (daily view) or first day of the week (individual view).
    mode:
        :class:`ViewMode` selecting the window shape.
    machine_id:
        Machine shown in the individual view.
    machine_ids:
        Machines selected for the daily view (``None`` uses the settings' machine list).
    machine_offset:
        First machine column shown when more machines are selected than fit.
    """

    day: date
    mode: ViewMode = ViewMode.DAILY
    machine_id: str | None = None
    machine_ids: tuple[str, ...] | None = None
    machine_offset: int = 0


@dataclass(frozen=True, slots=True)
class Column:
    """One vertical 24-hour timeline of the grid."""

    machine_id: str
    day_start: datetime
    entries: tuple[PositionedBlock, ...]


def daily_columns(
    blocks: Sequence[Block],
    day: date | datetime,
    machine_ids: Sequence[str],
    settings: ViewSettings,
) -> list[Column]:
    """One column per machine for the visible day; blocks must start inside that day."""
    start, end = view_window(day, ViewMode.DAILY, tz=blocks_tzinfo(blocks))
    visible = select_visible(blocks, start, end, machine_ids)
    columns = []
    for machine_id in machine_ids:
        own = [block for block in visible if block.machine_id == machine_id]
        entries = layout(own, start, settings.pixels_per_hour, settings.layout)
        columns.append(Column(machine_id=machine_id, day_start=start, entries=tuple(entries)))
    return columns


def weekly_columns(
    blocks: Sequence[Block],
    day: date | datetime,
    machine_id: str,
    settings: ViewSettings,
) -> list[Column]:
    """One column per day for a single machine, splitting blocks that cross midnight."""
    start, end = view_window(day, ViewMode.INDIVIDUAL, settings.week_days, tz=blocks_tzinfo(blocks))
    visible = select_visible(blocks, start, end, [machine_id])
    columns = []
    for column_start in day_starts(start, settings.week_days):
        fragments = fragments_for_day(visible, column_start)
        entries = layout(fragments, column_start, settings.pixels_per_hour, settings.layout)
        columns.append(Column(machine_id=machine_id, day_start=column_start, entries=tuple(entries)))
    return columns


def build_view(blocks: Sequence[Block], params: ViewParams, settings: ViewSettings) -> list[Column]:
    """Filter, split and lay out ``blocks`` for the requested view."""
    mode = ViewMode(params.mode)
    selected = list(params.machine_ids or settings.machine_ids)
    if mode is ViewMode.INDIVIDUAL:
        machine_id = params.machine_id or (selected[0] if selected else None)
        if machine_id is None:
            return []
        return weekly_columns(blocks, params.day, machine_id, settings)
    shown = visible_machines(selected, params.machine_offset, settings.max_visible_machines)
    return daily_columns(blocks, start_of_day(params.day, blocks_tzinfo(blocks)), shown, settings)
