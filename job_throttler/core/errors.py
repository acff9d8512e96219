"""Application-level exception types.

Throttler failures fall into two buckets: configuration problems, which are
fatal at setup time, and counter store outages, which are recoverable and
handled according to the configured failure policy. Failures raised by the
job body itself are never wrapped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability."""

    code: str
    message: str
    hint: str
    worker_type: str
    store: str
    field: str
    error_type: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for throttler failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ConfigurationAppError(AppError):
    """Raised when a quota or backend configuration is missing or invalid."""


class StoreUnavailableAppError(AppError):
    """Raised when the counter store cannot be reached or times out."""
