"""Schedule contract, canonical blocks and normalisation."""

from .blocks import AdjustmentBlock, Block, BlockKind, DelayRecord, ProductionBlock, is_production
from .contract import (
    RawDelayEntry,
    RawOrderItem,
    RawProductionItem,
    RawSetupItem,
    ScheduleRequest,
    ScheduleResponse,
    ScheduleSummary,
)
from .normalize import delay_records, merge_delays, normalize, normalize_item, normalize_response

__all__ = [
    "BlockKind",
    "Block",
    "ProductionBlock",
    "AdjustmentBlock",
    "DelayRecord",
    "is_production",
    "RawProductionItem",
    "RawOrderItem",
    "RawSetupItem",
    "RawDelayEntry",
    "ScheduleSummary",
    "ScheduleResponse",
    "ScheduleRequest",
    "normalize",
    "normalize_item",
    "delay_records",
    "merge_delays",
    "normalize_response",
]
