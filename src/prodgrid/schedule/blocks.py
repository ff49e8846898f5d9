"""Canonical schedule blocks shared by normalisation, splitting and layout."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import ClassVar

from prodgrid.core.errors import ProdgridValueError

__all__ = [
    "BlockKind",
    "DelayRecord",
    "Block",
    "ProductionBlock",
    "AdjustmentBlock",
    "is_production",
]


class BlockKind(str, Enum):
    PRODUCTION = "PRODUCTION"
    ADJUSTMENT = "ADJUSTMENT"


@dataclass(frozen=True, slots=True)
class DelayRecord:
    """Lateness annotation for a single order.

    Attributes
    ----------
    order_id:
        Order identifier matched against ``ProductionBlock.order_ids``.
    delay_hours:
        Hours of lateness reported by the scheduler (non-negative).
    due_hours / completion_hours:
        Optional due and completion instants, in hours from the schedule origin.
    cluster:
        Optional cluster/priority identifier assigned by the scheduler.
    """

    order_id: str
    delay_hours: float
    due_hours: float | None = None
    completion_hours: float | None = None
    cluster: int | str | None = None

    def __post_init__(self) -> None:
        if self.delay_hours < 0:
            raise ProdgridValueError("DelayRecord.delay_hours must be non-negative")


@dataclass(frozen=True, slots=True)
class Block:
    """Machine/time interval shown on the calendar.

    Blocks are rebuilt on every schedule fetch and never mutated afterwards; the ``id``
    is the only identity that survives across fetches.
    """

    kind: ClassVar[BlockKind]

    id: str
    machine_id: str
    start_time: datetime
    end_time: datetime

    def __post_init__(self) -> None:
        if self.end_time <= self.start_time:
            raise ProdgridValueError(
                f"Block {self.id!r} must end after it starts ({self.start_time} >= {self.end_time})"
            )

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


@dataclass(frozen=True, slots=True)
class ProductionBlock(Block):
    """Production run covering zero or more orders."""

    kind: ClassVar[BlockKind] = BlockKind.PRODUCTION

    product_label: str = ""
    quantity: int = 0
    extra_quantity: int = 0
    format: str | None = None
    order_ids: tuple[str, ...] = ()
    on_time: bool = True
    delayed_orders: tuple[DelayRecord, ...] = ()
    due_hours: float | None = None

    def __post_init__(self) -> None:
        Block.__post_init__(self)
        if self.quantity < 0 or self.extra_quantity < 0:
            raise ProdgridValueError(f"Block {self.id!r} quantities must be non-negative")

    @property
    def is_delayed(self) -> bool:
        return bool(self.delayed_orders)


@dataclass(frozen=True, slots=True)
class AdjustmentBlock(Block):
    """Setup/changeover period between two production formats."""

    kind: ClassVar[BlockKind] = BlockKind.ADJUSTMENT

    description: str = ""


def is_production(block: Block) -> bool:
    return block.kind is BlockKind.PRODUCTION
