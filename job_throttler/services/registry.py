"""Registry mapping worker types to their quotas."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Mapping, TypeVar

from pydantic import ValidationError

from job_throttler.core.errors import ConfigurationAppError
from job_throttler.schemas.quota import Quota

logger = logging.getLogger(__name__)

T = TypeVar("T")


def worker_type_of(worker: Any) -> str:
    """Return the worker type name for a class, function or plain string."""
    if isinstance(worker, str):
        return worker
    return f"{worker.__module__}.{worker.__qualname__}"


class QuotaRegistry:
    """Explicit worker type -> Quota mapping handed to the dispatcher.

    Quotas are validated on registration; an invalid one raises
    ConfigurationAppError so a broken limiter is never installed.
    """

    def __init__(self, quotas: Mapping[str, Quota | Mapping[str, Any]] | None = None) -> None:
        self._quotas: dict[str, Quota] = {}
        for worker_type, quota in (quotas or {}).items():
            self.register(worker_type, quota)

    def __contains__(self, worker: object) -> bool:
        return worker_type_of(worker) in self._quotas

    def __len__(self) -> int:
        return len(self._quotas)

    def __iter__(self) -> Iterator[str]:
        return iter(self._quotas)

    def register(self, worker: Any, quota: Quota | Mapping[str, Any] | None) -> Quota:
        """Validate and store a quota for a worker type.

        Args:
            worker: Worker type name, or the worker class/function itself.
            quota: Quota instance or a mapping of its fields.

        Returns:
            The registered Quota.

        Raises:
            ConfigurationAppError: If the quota is missing or invalid.
        """
        worker_type = worker_type_of(worker)
        if not worker_type:
            raise ConfigurationAppError(
                code="quota_missing_worker_type",
                message="Quota must be registered under a non-empty worker type",
            )
        if quota is None:
            raise ConfigurationAppError(
                code="quota_missing",
                message=f"No quota given for worker type '{worker_type}'",
                details={"worker_type": worker_type},
            )

        if not isinstance(quota, Quota):
            try:
                quota = Quota(**quota)
            except (TypeError, ValidationError) as exc:
                raise ConfigurationAppError(
                    code="quota_invalid",
                    message=f"Invalid quota for worker type '{worker_type}': {exc}",
                    details={"worker_type": worker_type},
                ) from exc

        self._quotas[worker_type] = quota
        logger.info(
            "quota.registered",
            extra={
                "worker_type": worker_type,
                "limit": quota.limit,
                "period_s": quota.period,
                "per": quota.per.value,
            },
        )
        return quota

    def get(self, worker: Any) -> Quota | None:
        return self._quotas.get(worker_type_of(worker))

    def items(self) -> list[tuple[str, Quota]]:
        return list(self._quotas.items())

    def throttle(self, **quota: Any) -> Callable[[T], T]:
        """Decorator registering a quota for the decorated worker.

        Example:
            >>> registry = QuotaRegistry()
            >>> @registry.throttle(limit=10, period=60, per="queue")
            ... class SendEmailWorker: ...
        """

        def decorator(worker: T) -> T:
            self.register(worker, quota)
            return worker

        return decorator
