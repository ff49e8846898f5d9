"""HTTP access to the scheduling backend."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from prodgrid.config import api_base_url
from prodgrid.core.errors import ScheduleFetchError, ScheduleValidationError
from prodgrid.schedule.blocks import Block
from prodgrid.schedule.contract import ScheduleRequest, ScheduleResponse
from prodgrid.schedule.normalize import normalize_response

__all__ = [
    "SCHEDULE_PATH",
    "DEFAULT_ERROR",
    "describe_error_response",
    "ScheduleClient",
    "FetchResult",
    "load_blocks",
    "fetch_logs",
]

SCHEDULE_PATH = "/api/schedule"
DEFAULT_ERROR = "Failed to fetch schedule"


def _format_validation_detail(detail: Any) -> str:
    if isinstance(detail, list):
        lines = []
        for entry in detail:
            if isinstance(entry, Mapping):
                loc = ".".join(str(part) for part in entry.get("loc") or ())
                lines.append(f"{loc}: {entry.get('msg', '')}")
            else:
                lines.append(str(entry))
        return "\n".join(lines)
    return json.dumps(detail, ensure_ascii=False)


def describe_error_response(status_code: int, payload: Any, reason: str | None = None) -> str:
    """Human-readable message for a failed schedule request.

    Parameters
    ----------
    status_code:
        HTTP status of the response.
    payload:
        Decoded JSON body, or ``None`` when the body was not JSON.
    reason:
        HTTP reason phrase used when the body carries no message.
    """
    message = DEFAULT_ERROR
    if isinstance(payload, Mapping):
        detail = payload.get("detail")
        if status_code == 422 and detail:
            message = f"Validation error:\n{_format_validation_detail(detail)}"
        elif isinstance(detail, str) and detail:
            message = detail
        elif detail:
            message = json.dumps(detail, ensure_ascii=False)
        elif payload.get("message"):
            message = str(payload["message"])
    elif reason:
        message = reason
    return f"{message} (Status: {status_code})"


def _request_payload(request: ScheduleRequest | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(request, ScheduleRequest):
        return request.to_payload()
    return dict(request)


def _parse_response(response: httpx.Response) -> ScheduleResponse:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if response.is_error:
        message = describe_error_response(response.status_code, payload, response.reason_phrase)
        detail = payload.get("detail") if isinstance(payload, Mapping) else None
        if response.status_code == 422 and detail:
            raise ScheduleValidationError(
                message, details=detail if isinstance(detail, list) else [detail]
            )
        raise ScheduleFetchError(message, status_code=response.status_code)
    if not isinstance(payload, Mapping):
        raise ScheduleFetchError(
            f"Schedule response is not a JSON object (Status: {response.status_code})",
            status_code=response.status_code,
        )
    try:
        return ScheduleResponse.model_validate(payload)
    except ValidationError as exc:
        raise ScheduleFetchError(
            f"Malformed schedule response: {exc.error_count()} error(s)",
            status_code=response.status_code,
        ) from exc


class ScheduleClient:
    """Submit schedule requests to the backend (``POST /api/schedule``).

    ``transport`` lets tests plug in :class:`httpx.MockTransport`; an
    :class:`httpx.AsyncBaseTransport` is expected for :meth:`afetch_schedule`.
    """

    TIMEOUT = 30.0

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float = TIMEOUT,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or api_base_url()).rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{SCHEDULE_PATH}"

    def fetch_schedule(self, request: ScheduleRequest | Mapping[str, Any]) -> ScheduleResponse:
        """POST ``request`` and return the parsed response; failures raise ``ScheduleFetchError``."""
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if self.transport is not None:
            kwargs["transport"] = self.transport
        try:
            with httpx.Client(**kwargs) as client:
                response = client.post(self.endpoint, json=_request_payload(request))
        except httpx.HTTPError as exc:
            raise ScheduleFetchError(f"{DEFAULT_ERROR}: {exc}") from exc
        return _parse_response(response)

    async def afetch_schedule(
        self, request: ScheduleRequest | Mapping[str, Any]
    ) -> ScheduleResponse:
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if self.transport is not None:
            kwargs["transport"] = self.transport
        try:
            async with httpx.AsyncClient(**kwargs) as client:
                response = await client.post(self.endpoint, json=_request_payload(request))
        except httpx.HTTPError as exc:
            raise ScheduleFetchError(f"{DEFAULT_ERROR}: {exc}") from exc
        return _parse_response(response)


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of a schedule load handed to the rendering layer.

    On failure ``blocks`` is empty and ``error`` holds the display message, so the
    calendar can offer a retry instead of crashing.
    """

    blocks: tuple[Block, ...] = ()
    logs: tuple[str, ...] = ()
    error: str | None = None
    response: ScheduleResponse | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, message: str) -> "FetchResult":
        return cls(error=message)

    @classmethod
    def from_response(cls, response: ScheduleResponse, request: ScheduleRequest) -> "FetchResult":
        blocks = normalize_response(response, request.start_datetime)
        return cls(blocks=tuple(blocks), logs=tuple(response.logs), response=response)


def load_blocks(client: ScheduleClient, request: ScheduleRequest) -> FetchResult:
    """Fetch and normalise a schedule, converting failures into an error result."""
    try:
        response = client.fetch_schedule(request)
    except ScheduleFetchError as exc:
        return FetchResult.failed(exc.message)
    return FetchResult.from_response(response, request)


def fetch_logs(client: ScheduleClient, request: ScheduleRequest | Mapping[str, Any]) -> list[str]:
    """Backend diagnostic lines, or a single ``Error: ...`` line when the fetch fails."""
    try:
        return list(client.fetch_schedule(request).logs)
    except ScheduleFetchError as exc:
        return [f"Error: {exc.message}"]
