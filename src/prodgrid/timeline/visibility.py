"""Select the blocks and machines shown in the current calendar window."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, tzinfo
from enum import Enum
from typing import TypeVar

from prodgrid.schedule.blocks import Block
from prodgrid.timeline.days import DAY, start_of_day

__all__ = [
    "ViewMode",
    "WINDOW_DAYS",
    "select_visible",
    "view_window",
    "visible_machines",
    "toggle_machine",
]

_B = TypeVar("_B", bound=Block)


class ViewMode(str, Enum):
    DAILY = "DAILY"  # every selected machine, one day
    INDIVIDUAL = "INDIVIDUAL"  # one machine, one week


WINDOW_DAYS: dict[ViewMode, int] = {ViewMode.DAILY: 1, ViewMode.INDIVIDUAL: 7}


def select_visible(
    blocks: Iterable[_B],
    window_start: datetime,
    window_end: datetime,
    machine_ids: Iterable[str] | None = None,
) -> list[_B]:
    """Keep blocks starting inside ``[window_start, window_end)``.

    When ``machine_ids`` is given only blocks on those machines are kept (membership
    only, order is irrelevant). Input order is preserved.
    """
    allowed = None if machine_ids is None else frozenset(machine_ids)
    return [
        block
        for block in blocks
        if window_start <= block.start_time < window_end
        and (allowed is None or block.machine_id in allowed)
    ]


def view_window(
    day: date | datetime,
    mode: ViewMode,
    days: int | None = None,
    tz: tzinfo | None = None,
) -> tuple[datetime, datetime]:
    """Half-open window displayed for ``day``: one day (daily) or a week (individual).

    ``tz`` is the timezone of the schedule being filtered; see :func:`start_of_day`.
    """
    start = start_of_day(day, tz)
    span = WINDOW_DAYS[ViewMode(mode)] if days is None else days
    return start, start + span * DAY


def visible_machines(selected: Sequence[str], offset: int = 0, limit: int = 7) -> list[str]:
    """Page of machine columns shown side by side in the daily view."""
    if limit <= 0:
        return []
    offset = max(offset, 0)
    return list(selected[offset : offset + limit])


def toggle_machine(selected: Sequence[str], machine_id: str) -> list[str]:
    if machine_id in selected:
        return [value for value in selected if value != machine_id]
    return [*selected, machine_id]
