"""Job throttler: quota enforcement for job workers over a pluggable counter store."""

from job_throttler.adapters.counter_store import (
    CounterStore,
    InMemoryCounterStore,
    RedisCounterStore,
    create_counter_store,
)
from job_throttler.core.errors import AppError, ConfigurationAppError, StoreUnavailableAppError
from job_throttler.schemas.quota import LimiterIdentity, Per, Quota
from job_throttler.schemas.verdict import Exceeded, Verdict, WithinBounds
from job_throttler.services import (
    Dispatcher,
    FailurePolicy,
    Job,
    QuotaRegistry,
    RateLimitEngine,
    build_limiter_key,
    create_dispatcher,
)

__all__ = [
    "AppError",
    "ConfigurationAppError",
    "CounterStore",
    "Dispatcher",
    "Exceeded",
    "FailurePolicy",
    "InMemoryCounterStore",
    "Job",
    "LimiterIdentity",
    "Per",
    "Quota",
    "QuotaRegistry",
    "RateLimitEngine",
    "RedisCounterStore",
    "StoreUnavailableAppError",
    "Verdict",
    "WithinBounds",
    "build_limiter_key",
    "create_counter_store",
    "create_dispatcher",
]
