"""Tabular views of laid-out calendar columns."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pandas as pd

from prodgrid.schedule.blocks import AdjustmentBlock, ProductionBlock
from prodgrid.timeline.days import DayFragment
from prodgrid.timeline.grid import Column
from prodgrid.timeline.layout import PositionedBlock

__all__ = ["POSITIONED_COLUMNS", "positioned_row", "columns_dataframe"]

POSITIONED_COLUMNS = [
    "machine_id",
    "day",
    "block_id",
    "kind",
    "start_time",
    "end_time",
    "top_px",
    "height_px",
    "is_last",
    "is_continuation",
    "is_partial",
    "label",
    "quantity",
    "order_ids",
    "delayed_orders",
]


def positioned_row(column: Column, item: PositionedBlock) -> dict[str, Any]:
    """Flatten one positioned entry into a record keyed by ``POSITIONED_COLUMNS``."""
    entry = item.entry
    block = entry.block if isinstance(entry, DayFragment) else entry
    row: dict[str, Any] = {
        "machine_id": column.machine_id,
        "day": column.day_start.date().isoformat(),
        "block_id": item.id,
        "kind": block.kind.value,
        "start_time": entry.start_time,
        "end_time": entry.end_time,
        "top_px": round(item.top_offset, 3),
        "height_px": round(item.rendered_height, 3),
        "is_last": item.is_last_in_column,
        "is_continuation": isinstance(entry, DayFragment) and entry.is_continuation,
        "is_partial": isinstance(entry, DayFragment) and entry.is_partial,
        "label": None,
        "quantity": None,
        "order_ids": None,
        "delayed_orders": None,
    }
    if isinstance(block, ProductionBlock):
        row["label"] = block.product_label
        row["quantity"] = block.quantity
        row["order_ids"] = ",".join(block.order_ids)
        row["delayed_orders"] = ",".join(record.order_id for record in block.delayed_orders)
    elif isinstance(block, AdjustmentBlock):
        row["label"] = block.description
    return row


def columns_dataframe(columns: Sequence[Column]) -> pd.DataFrame:
    """Return every positioned entry of ``columns`` as a DataFrame (one row per entry)."""
    rows = [positioned_row(column, item) for column in columns for item in column.entries]
    if not rows:
        return pd.DataFrame(columns=POSITIONED_COLUMNS)
    return pd.DataFrame(rows).reindex(columns=POSITIONED_COLUMNS)
