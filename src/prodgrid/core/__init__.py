"""Core utilities shared across prodgrid modules."""

from .errors import (
    LayoutConfigError,
    ProdgridValueError,
    ScheduleFetchError,
    ScheduleValidationError,
)

__all__ = [
    "ProdgridValueError",
    "LayoutConfigError",
    "ScheduleFetchError",
    "ScheduleValidationError",
]
