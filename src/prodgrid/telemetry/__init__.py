"""Structured telemetry helpers."""

from .fetch_log import FetchTelemetryLogger
from .jsonl import append_jsonl, read_jsonl

__all__ = ["FetchTelemetryLogger", "append_jsonl", "read_jsonl"]
