"""Pydantic models describing the scheduling backend's wire format."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

__all__ = [
    "RawProductionItem",
    "RawOrderItem",
    "RawSetupItem",
    "RawScheduleItem",
    "RAW_ITEM_ADAPTER",
    "RawDelayEntry",
    "ScheduleSummary",
    "ScheduleResponse",
    "ScheduleRequest",
]


def _coerce_quantity(value: Any) -> Any:
    # The scheduler serialises quantities as floats (``500.0``); fractional parts are noise.
    if isinstance(value, float) and value == value:
        return int(round(value))
    return value


class _RawItem(BaseModel):
    """Fields shared by every schedule entry.

    Attributes
    ----------
    machine:
        Machine identifier the entry is scheduled on.
    start / end:
        Offsets in hours from the request's ``start_datetime``.
    """

    model_config = ConfigDict(extra="ignore")

    machine: str
    start: float
    end: float

    @field_validator("machine")
    @classmethod
    def _machine_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("schedule entry machine must be non-empty")
        return value

    @model_validator(mode="after")
    def _end_after_start(self) -> "_RawItem":
        if self.end <= self.start:
            raise ValueError("schedule entry must end after it starts")
        return self


class RawProductionItem(_RawItem):
    """Multi-order production run (current backend format)."""

    type: Literal["PRODUCTION"]
    id: str | None = None
    product: str | None = None
    format: str | None = None
    quantity: int = 0
    qty_extra: int = 0
    ot_ids: list[str] = Field(default_factory=list)
    on_time: bool | None = None

    @field_validator("quantity", "qty_extra", mode="before")
    @classmethod
    def _whole_quantity(cls, value: Any) -> Any:
        return 0 if value is None else _coerce_quantity(value)

    @field_validator("quantity", "qty_extra")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("quantities must be non-negative")
        return value

    @field_validator("ot_ids", mode="before")
    @classmethod
    def _ids_default(cls, value: Any) -> Any:
        return [] if value is None else value


class RawOrderItem(_RawItem):
    """Legacy single-order entry (``type == "OT"``)."""

    type: Literal["OT"]
    id: str
    qty_cliente: int | None = None
    qty: int | None = None
    qty_extra: int | None = None
    format: str | None = None
    due: float | None = None
    on_time: bool | None = None

    @field_validator("qty_cliente", "qty", "qty_extra", mode="before")
    @classmethod
    def _whole_quantity(cls, value: Any) -> Any:
        return _coerce_quantity(value)

    @field_validator("qty_cliente", "qty", "qty_extra")
    @classmethod
    def _non_negative(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("quantities must be non-negative")
        return value


class RawSetupItem(_RawItem):
    """Format changeover between two production runs."""

    type: Literal["SETUP"]
    format: str | None = None


RawScheduleItem = Annotated[
    Union[RawProductionItem, RawOrderItem, RawSetupItem],
    Field(discriminator="type"),
]

RAW_ITEM_ADAPTER: TypeAdapter[Any] = TypeAdapter(RawScheduleItem)


class RawDelayEntry(BaseModel):
    """Entry of ``summary.atrasos`` describing a late order."""

    model_config = ConfigDict(extra="ignore")

    ot_id: str
    atraso_horas: float = 0.0
    due: float | None = None
    completion: float | None = None
    cluster: int | str | None = None

    @field_validator("atraso_horas", mode="before")
    @classmethod
    def _delay_default(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @field_validator("atraso_horas")
    @classmethod
    def _delay_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("atraso_horas must be non-negative")
        return value


class ScheduleSummary(BaseModel):
    """Scheduler summary block; only ``atrasos`` is interpreted."""

    model_config = ConfigDict(extra="allow")

    atrasos: list[Any] = Field(default_factory=list)

    @field_validator("atrasos", mode="before")
    @classmethod
    def _atrasos_default(cls, value: Any) -> Any:
        return [] if value is None else value


class ScheduleResponse(BaseModel):
    """Body returned by ``POST /api/schedule``.

    ``schedule`` entries are kept as raw mappings so that normalisation can drop
    malformed entries one by one instead of rejecting the whole response.
    """

    model_config = ConfigDict(extra="allow")

    schedule: list[Any] = Field(default_factory=list)
    schedule_by_machine: dict[str, Any] = Field(default_factory=dict)
    summary: ScheduleSummary = Field(default_factory=ScheduleSummary)
    logs: list[str] = Field(default_factory=list)

    @field_validator("schedule", "logs", mode="before")
    @classmethod
    def _list_default(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("schedule_by_machine", mode="before")
    @classmethod
    def _mapping_default(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("summary", mode="before")
    @classmethod
    def _summary_default(cls, value: Any) -> Any:
        return {} if value is None else value


class ScheduleRequest(BaseModel):
    """Opaque request body forwarded to the scheduler.

    Only ``start_datetime`` is interpreted: it is the origin every ``start``/``end``
    offset in the response is relative to. Orders, machines, setup matrices and solver
    knobs are carried through untouched.
    """

    model_config = ConfigDict(extra="allow")

    start_datetime: datetime

    def with_origin(self, day: date, hour: int = 8) -> "ScheduleRequest":
        """Return a copy anchored at ``hour`` o'clock of ``day``."""
        origin = datetime.combine(day, time(hour=hour))
        if self.start_datetime.tzinfo is not None:
            origin = origin.replace(tzinfo=self.start_datetime.tzinfo)
        return self.model_copy(update={"start_datetime": origin})

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
