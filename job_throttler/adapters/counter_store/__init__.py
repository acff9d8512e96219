"""Counter store adapters - in-process and Redis-backed counting backends."""

from job_throttler.adapters.counter_store.base import CounterStore
from job_throttler.adapters.counter_store.factory import create_counter_store
from job_throttler.adapters.counter_store.in_memory import CounterRecord, InMemoryCounterStore
from job_throttler.adapters.counter_store.redis_store import RedisCounterStore

__all__ = [
    "CounterRecord",
    "CounterStore",
    "InMemoryCounterStore",
    "RedisCounterStore",
    "create_counter_store",
]
