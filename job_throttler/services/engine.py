"""Rate limit decision engine.

The engine increments first and compares afterwards, so every concurrent
caller gets a distinct count from the store's atomic increment. An over-quota
call still occupies a slot in the current window.
"""

from __future__ import annotations

import logging

from job_throttler.adapters.counter_store.base import CounterStore
from job_throttler.schemas.quota import LimiterIdentity, Quota
from job_throttler.schemas.verdict import Exceeded, Verdict, WithinBounds
from job_throttler.services.key_builder import build_limiter_key

logger = logging.getLogger(__name__)


class RateLimitEngine:
    """Stateless decision engine over a counter store.

    Store failures (StoreUnavailableAppError) propagate to the caller; the
    engine never retries and never picks a fallback verdict.
    """

    def __init__(self, store: CounterStore, *, key_prefix: str = "throttler") -> None:
        self._store = store
        self._key_prefix = key_prefix

    @property
    def store(self) -> CounterStore:
        return self._store

    def check(self, identity: LimiterIdentity, quota: Quota) -> Verdict:
        """Record one call against the quota and return the verdict.

        Args:
            identity: Worker type, arguments and queue of the call.
            quota: Quota configured for the worker type.

        Returns:
            WithinBounds when the call fits in the current window, otherwise
            Exceeded with the seconds until the window resets.

        Raises:
            StoreUnavailableAppError: If the counter store cannot be reached.
        """

        key = build_limiter_key(identity, quota, prefix=self._key_prefix)
        count = self._store.increment(key, amount=quota.cost, ttl_seconds=quota.period)

        if count <= quota.limit:
            logger.debug(
                "throttle.within_bounds",
                extra={
                    "worker_type": identity.worker_type,
                    "queue": identity.queue,
                    "limiter_key": key,
                    "count": count,
                    "limit": quota.limit,
                },
            )
            return WithinBounds(count=count, key=key)

        remaining = self._store.ttl(key)
        # Record expired between increment and ttl; wait a full period
        if remaining is None or remaining <= 0:
            delay = quota.period
        else:
            delay = min(remaining, quota.period)

        logger.info(
            "throttle.exceeded",
            extra={
                "worker_type": identity.worker_type,
                "queue": identity.queue,
                "limiter_key": key,
                "count": count,
                "limit": quota.limit,
                "period_s": quota.period,
                "delay_s": round(delay, 3),
            },
        )
        return Exceeded(delay=delay, count=count, key=key)
