"""Split blocks that cross midnight into per-day fragments."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo

from prodgrid.schedule.blocks import Block, BlockKind

__all__ = [
    "DAY",
    "DayFragment",
    "blocks_tzinfo",
    "start_of_day",
    "day_starts",
    "split_across_days",
    "fragments_for_day",
    "split_block",
]

DAY = timedelta(hours=24)


@dataclass(frozen=True, slots=True)
class DayFragment:
    """Portion of a block visible inside one ``[day_start, day_start + 24h)`` window.

    Attributes
    ----------
    block:
        Source block; fragments share its ``id`` so a selection maps back to it.
    start_time / end_time:
        Interval clipped to the day window.
    is_continuation:
        ``True`` when the source block started before the day.
    is_partial:
        ``True`` when the source block ends after the day.
    """

    block: Block
    start_time: datetime
    end_time: datetime
    is_continuation: bool = False
    is_partial: bool = False

    @property
    def id(self) -> str:
        return self.block.id

    @property
    def machine_id(self) -> str:
        return self.block.machine_id

    @property
    def kind(self) -> BlockKind:
        return self.block.kind


def blocks_tzinfo(blocks: Iterable[Block]) -> tzinfo | None:
    """Timezone the blocks were anchored in (``None`` for naive schedules)."""
    for block in blocks:
        return block.start_time.tzinfo
    return None


def start_of_day(moment: date | datetime, tz: tzinfo | None = None) -> datetime:
    """Midnight of the calendar day containing ``moment``.

    An aware ``moment`` keeps its own timezone; ``tz`` anchors plain dates and naive
    datetimes so the result compares with blocks built from an aware origin.
    """
    if isinstance(moment, datetime):
        midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        if midnight.tzinfo is None and tz is not None:
            midnight = midnight.replace(tzinfo=tz)
        return midnight
    return datetime.combine(moment, time.min, tzinfo=tz)


def day_starts(first_day: date | datetime, days: int, tz: tzinfo | None = None) -> list[datetime]:
    start = start_of_day(first_day, tz)
    return [start + index * DAY for index in range(days)]


def split_across_days(block: Block, day_start: datetime) -> DayFragment | None:
    """Clip ``block`` to the 24-hour window starting at ``day_start``.

    Returns ``None`` when the block does not intersect the window, in which case the
    caller omits the day.
    """
    day_end = day_start + DAY
    if not (block.start_time < day_end and block.end_time > day_start):
        return None
    is_continuation = block.start_time < day_start
    is_partial = block.end_time > day_end
    return DayFragment(
        block=block,
        start_time=day_start if is_continuation else block.start_time,
        end_time=day_end if is_partial else block.end_time,
        is_continuation=is_continuation,
        is_partial=is_partial,
    )


def fragments_for_day(blocks: Iterable[Block], day_start: datetime) -> list[DayFragment]:
    fragments = []
    for block in blocks:
        fragment = split_across_days(block, day_start)
        if fragment is not None:
            fragments.append(fragment)
    return fragments


def split_block(block: Block) -> Iterator[DayFragment]:
    """Yield one fragment per calendar day the block touches."""
    current = start_of_day(block.start_time)
    while current < block.end_time:
        fragment = split_across_days(block, current)
        if fragment is not None:
            yield fragment
        current += DAY
