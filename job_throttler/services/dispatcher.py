"""Decision dispatcher between the job framework and the rate limit engine.

Per job, the dispatcher asks the engine for a verdict and either runs the job
body inline or hands the job to the framework's ``defer`` callable with the
computed delay. Retries come back through ``dispatch`` and are decided from
scratch, so a job may be deferred several times in a row.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol

from job_throttler.core.errors import StoreUnavailableAppError
from job_throttler.core.logging import clear_job_id, get_job_id, set_job_id
from job_throttler.schemas.quota import LimiterIdentity, Quota
from job_throttler.schemas.verdict import Exceeded, Verdict, WithinBounds
from job_throttler.services.engine import RateLimitEngine
from job_throttler.services.registry import QuotaRegistry

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    """Behaviour when the counter store is unavailable."""

    OPEN = "open"
    CLOSED = "closed"
    RAISE = "raise"


@dataclass(frozen=True)
class Job:
    """A unit of work as seen by the throttler.

    Attributes:
        worker_type: Name the quota is registered under.
        args: Positional job arguments, passed back unchanged on deferral.
        queue: Queue the job was pulled from.
        batch_id: Identifier of the enclosing batch, if any.
        job_id: Framework job id, used for log correlation.
    """

    worker_type: str
    args: tuple[Any, ...] = field(default_factory=tuple)
    queue: str = "default"
    batch_id: str | None = None
    job_id: str | None = None

    @property
    def identity(self) -> LimiterIdentity:
        return LimiterIdentity(worker_type=self.worker_type, args=self.args, queue=self.queue)


class Batch(Protocol):
    """Live batch handle; jobs enqueued inside ``jobs()`` join the batch."""

    def jobs(self) -> AbstractContextManager[Any]:
        ...


class BatchLookup(Protocol):
    """Resolves a batch id to a live handle, or None when it no longer exists."""

    def __call__(self, batch_id: str) -> Batch | None:
        ...


class Dispatcher:
    """Routes each job to ``proceed`` or ``defer`` based on its quota.

    Args:
        registry: Quotas by worker type. Unregistered worker types always
            proceed without touching the store.
        engine: Rate limit engine bound to a counter store.
        failure_policy: What to do when the store raises
            StoreUnavailableAppError. Required; there is no implicit default.
        batch_lookup: Optional capability resolving a batch id to a live
            batch at the moment a job is deferred.
    """

    def __init__(
        self,
        registry: QuotaRegistry,
        engine: RateLimitEngine,
        *,
        failure_policy: FailurePolicy | str,
        batch_lookup: BatchLookup | None = None,
    ) -> None:
        self._registry = registry
        self._engine = engine
        self._failure_policy = FailurePolicy(failure_policy)
        self._batch_lookup = batch_lookup

    @property
    def failure_policy(self) -> FailurePolicy:
        return self._failure_policy

    def dispatch(
        self,
        job: Job,
        proceed: Callable[[], Any],
        defer: Callable[[float, Job], Any],
    ) -> Verdict:
        """Decide one job and run the matching handler.

        Args:
            job: The job being processed.
            proceed: Runs the job body. Exceptions it raises propagate unchanged.
            defer: Schedules ``job`` to run again after the given delay in seconds.

        Returns:
            The verdict that was acted upon.

        Raises:
            StoreUnavailableAppError: If the store is unavailable and the
                failure policy is RAISE.
        """

        previous_job_id = get_job_id()
        if job.job_id:
            set_job_id(job.job_id)
        try:
            quota = self._registry.get(job.worker_type)
            if quota is None:
                proceed()
                return WithinBounds()

            verdict = self._decide(job, quota)
            if isinstance(verdict, Exceeded):
                self._defer(job, verdict, defer)
            else:
                proceed()
            return verdict
        finally:
            if previous_job_id is None:
                clear_job_id()
            else:
                set_job_id(previous_job_id)

    def _decide(self, job: Job, quota: Quota) -> Verdict:
        try:
            return self._engine.check(job.identity, quota)
        except StoreUnavailableAppError as exc:
            logger.warning(
                "throttle.store_unavailable",
                extra={
                    "worker_type": job.worker_type,
                    "queue": job.queue,
                    "failure_policy": self._failure_policy.value,
                    "error_code": exc.code,
                },
            )
            if self._failure_policy is FailurePolicy.OPEN:
                return WithinBounds()
            if self._failure_policy is FailurePolicy.CLOSED:
                return Exceeded(delay=quota.period)
            raise

    def _defer(self, job: Job, verdict: Exceeded, defer: Callable[[float, Job], Any]) -> None:
        # Batch is resolved now, not when the job was first seen
        batch = None
        if job.batch_id and self._batch_lookup is not None:
            batch = self._batch_lookup(job.batch_id)

        logger.info(
            "throttle.deferred",
            extra={
                "worker_type": job.worker_type,
                "queue": job.queue,
                "delay_s": round(verdict.delay, 3),
                "job_args": list(job.args),
                "batch_id": job.batch_id if batch is not None else None,
            },
        )

        if batch is None:
            defer(verdict.delay, job)
            return

        with batch.jobs():
            defer(verdict.delay, job)
