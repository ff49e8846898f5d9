"""Convert backend schedule entries into canonical blocks."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ValidationError

from prodgrid.core.errors import ProdgridValueError
from prodgrid.schedule.blocks import AdjustmentBlock, Block, DelayRecord, ProductionBlock
from prodgrid.schedule.contract import (
    RAW_ITEM_ADAPTER,
    RawDelayEntry,
    RawOrderItem,
    RawProductionItem,
    RawSetupItem,
    ScheduleResponse,
)

__all__ = [
    "normalize",
    "normalize_item",
    "delay_records",
    "merge_delays",
    "normalize_response",
    "format_offset",
]

KNOWN_TYPES = frozenset({"PRODUCTION", "OT", "SETUP"})


def format_offset(hours: float) -> str:
    """Render an hour offset the way synthesised ids spell it (``3`` not ``3.0``)."""
    if float(hours).is_integer():
        return str(int(hours))
    return repr(float(hours))


def _at(origin: datetime, hours: float) -> datetime:
    return origin + timedelta(hours=hours)


def _from_production(item: RawProductionItem, origin: datetime) -> ProductionBlock:
    block_id = item.id or f"PROD-{item.machine}-{format_offset(item.start)}"
    return ProductionBlock(
        id=block_id,
        machine_id=item.machine,
        start_time=_at(origin, item.start),
        end_time=_at(origin, item.end),
        product_label=item.product or item.format or block_id,
        quantity=item.quantity,
        extra_quantity=item.qty_extra,
        format=item.format or item.product,
        order_ids=tuple(item.ot_ids),
        on_time=True if item.on_time is None else item.on_time,
    )


def _from_order(item: RawOrderItem, origin: datetime) -> ProductionBlock:
    return ProductionBlock(
        id=item.id,
        machine_id=item.machine,
        start_time=_at(origin, item.start),
        end_time=_at(origin, item.end),
        product_label=item.id,
        quantity=item.qty_cliente or item.qty or 0,
        extra_quantity=item.qty_extra or 0,
        format=item.format,
        order_ids=(item.id,),
        on_time=True if item.on_time is None else item.on_time,
        due_hours=item.due,
    )


def _from_setup(item: RawSetupItem, origin: datetime) -> AdjustmentBlock:
    target = item.format or "N/A"
    return AdjustmentBlock(
        id=f"SETUP-{item.machine}-{format_offset(item.start)}",
        machine_id=item.machine,
        start_time=_at(origin, item.start),
        end_time=_at(origin, item.end),
        description=f"Setup - format change to {target}",
    )


def _as_mapping(raw: Any) -> Mapping[str, Any] | None:
    if isinstance(raw, BaseModel):
        return raw.model_dump()
    if isinstance(raw, Mapping):
        return raw
    return None


def normalize_item(raw: Any, origin: datetime) -> Block | None:
    """Convert one backend entry, returning ``None`` when it cannot be displayed."""
    data = _as_mapping(raw)
    if data is None:
        return None
    kind = data.get("type")
    if not isinstance(kind, str) or kind not in KNOWN_TYPES:
        return None
    try:
        item = RAW_ITEM_ADAPTER.validate_python(data)
    except ValidationError:
        return None
    try:
        if isinstance(item, RawProductionItem):
            return _from_production(item, origin)
        if isinstance(item, RawOrderItem):
            return _from_order(item, origin)
        return _from_setup(item, origin)
    except ProdgridValueError:
        # Offsets closer than the datetime resolution collapse to an empty interval.
        return None


def normalize(raw_items: Iterable[Any], origin: datetime) -> list[Block]:
    """Convert raw schedule entries into blocks, dropping entries that do not validate.

    Parameters
    ----------
    raw_items:
        Entries of the backend ``schedule`` list (mappings or parsed raw models).
    origin:
        Timestamp the ``start``/``end`` hour offsets are relative to.

    Returns
    -------
    list[Block]
        Blocks in input order. Unknown ``type`` values and malformed entries are
        skipped silently; the backend owns the contract and a partial schedule is
        still worth displaying.
    """
    blocks: list[Block] = []
    for raw in raw_items:
        block = normalize_item(raw, origin)
        if block is not None:
            blocks.append(block)
    return blocks


def delay_records(raw_entries: Iterable[Any]) -> list[DelayRecord]:
    """Map ``summary.atrasos`` entries to :class:`DelayRecord`, skipping malformed ones."""
    records: list[DelayRecord] = []
    for raw in raw_entries:
        data = _as_mapping(raw)
        if data is None:
            continue
        try:
            entry = RawDelayEntry.model_validate(data)
        except ValidationError:
            continue
        records.append(
            DelayRecord(
                order_id=entry.ot_id,
                delay_hours=entry.atraso_horas,
                due_hours=entry.due,
                completion_hours=entry.completion,
                cluster=entry.cluster,
            )
        )
    return records


def merge_delays(blocks: Sequence[Block], records: Sequence[DelayRecord]) -> list[Block]:
    """Attach delay records to the production blocks covering their orders.

    Each production block receives exactly the records whose ``order_id`` is one of its
    ``order_ids``, in the order ``records`` lists them. Adjustment blocks are passed
    through; new block instances are returned and the inputs are left untouched.
    """
    merged: list[Block] = []
    for block in blocks:
        if not isinstance(block, ProductionBlock):
            merged.append(block)
            continue
        orders = set(block.order_ids)
        matched = tuple(record for record in records if record.order_id in orders)
        merged.append(replace(block, delayed_orders=matched))
    return merged


def normalize_response(
    response: ScheduleResponse | Mapping[str, Any], origin: datetime
) -> list[Block]:
    """Run both normalisation stages over a full scheduler response."""
    if not isinstance(response, ScheduleResponse):
        response = ScheduleResponse.model_validate(response)
    blocks = normalize(response.schedule, origin)
    return merge_delays(blocks, delay_records(response.summary.atrasos))
