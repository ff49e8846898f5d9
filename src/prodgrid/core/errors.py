"""Common prodgrid-specific exceptions."""

from __future__ import annotations


class ProdgridValueError(ValueError):
    """Raised when prodgrid detects invalid user-provided data."""


class LayoutConfigError(ProdgridValueError):
    """Raised when a column layout cannot be computed with the given configuration."""


class ScheduleFetchError(RuntimeError):
    """Raised when the scheduling backend cannot be reached or rejects a request.

    Attributes
    ----------
    message:
        Human-readable description suitable for display in the calendar.
    status_code:
        HTTP status returned by the backend (``None`` for transport failures).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ScheduleValidationError(ScheduleFetchError):
    """Backend rejected the request body (HTTP 422 with a structured ``detail``)."""

    def __init__(self, message: str, details: list | None = None, status_code: int = 422) -> None:
        super().__init__(message, status_code=status_code)
        self.details = list(details or [])


__all__ = [
    "ProdgridValueError",
    "LayoutConfigError",
    "ScheduleFetchError",
    "ScheduleValidationError",
]
