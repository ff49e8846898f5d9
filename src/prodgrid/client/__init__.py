"""Scheduling backend client (HTTP fetch boundary)."""

from .http import (
    FetchResult,
    ScheduleClient,
    describe_error_response,
    fetch_logs,
    load_blocks,
)
from .loader import ScheduleLoader, visible_result

__all__ = [
    "ScheduleClient",
    "FetchResult",
    "describe_error_response",
    "load_blocks",
    "fetch_logs",
    "ScheduleLoader",
    "visible_result",
]
