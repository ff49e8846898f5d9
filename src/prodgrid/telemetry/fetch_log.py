"""Context manager for capturing schedule fetch telemetry."""

from __future__ import annotations

import time
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping
from uuid import uuid4

from .jsonl import append_jsonl


def _iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass(slots=True)
class FetchTelemetryLogger(AbstractContextManager["FetchTelemetryLogger"]):
    """Record one schedule fetch as a JSONL line.

    Parameters
    ----------
    log_path:
        JSONL path where fetch records are appended.
    endpoint:
        Backend URL the request was sent to.
    origin:
        ISO timestamp of the request's ``start_datetime``.
    context:
        Extra metadata (view mode, machine, source command).
    """

    log_path: Path
    endpoint: str
    origin: str | None = None
    context: Mapping[str, Any] | None = None
    schema_version: str = "1.0"
    fetch_id: str = field(default_factory=lambda: uuid4().hex, init=False)
    _start_time: float = field(default=0.0, init=False)
    _start_timestamp: str | None = field(default=None, init=False)
    _closed: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.log_path = Path(self.log_path)

    def __enter__(self) -> "FetchTelemetryLogger":
        self._start_time = time.perf_counter()
        self._start_timestamp = _iso_now()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type:
            self.finish(status="error", error=str(exc) or repr(exc))
            return False
        if not self._closed:
            self.finish(status="ok")
        return False

    def finish(
        self,
        *,
        status: str,
        status_code: int | None = None,
        block_count: int | None = None,
        log_lines: int | None = None,
        error: str | None = None,
    ) -> None:
        """Write the fetch record; later calls are ignored."""
        if self._closed:
            return
        duration = time.perf_counter() - self._start_time if self._start_time else None
        record: dict[str, Any] = {
            "record_type": "fetch",
            "schema_version": self.schema_version,
            "fetch_id": self.fetch_id,
            "endpoint": self.endpoint,
            "origin": self.origin,
            "started_at": self._start_timestamp,
            "finished_at": _iso_now(),
            "duration_seconds": duration,
            "status": status,
            "status_code": status_code,
            "block_count": block_count,
            "log_lines": log_lines,
            "error": error,
            "context": dict(self.context or {}),
        }
        append_jsonl(self.log_path, record)
        self._closed = True


__all__ = ["FetchTelemetryLogger"]
