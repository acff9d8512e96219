"""In-process fixed-window counter store.

Notes:
- Per-process only: running several worker processes multiplies the
  effective limit. Use the Redis store for shared quotas.
- Thread-safe: a single lock guards increment and expiry as one critical
  section.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass
class CounterRecord:
    """Counter state for one limiter key."""

    count: int
    window_start: float
    expires_at: float


class InMemoryCounterStore:
    """Counter store backed by a dict guarded by one lock.

    Expired records are replaced when their key is touched again, and every
    ``sweep_interval_seconds`` an increment also drops all expired records,
    so keys that went quiet do not accumulate.
    """

    name = "memory"

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval_seconds: float = 60.0,
    ) -> None:
        """Initialize the in-memory store.

        Args:
            clock: Time source in seconds. Must be monotonic non-decreasing.
            sweep_interval_seconds: Minimum time between full expiry sweeps.

        Raises:
            ValueError: If sweep_interval_seconds is not positive.
        """
        if sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be > 0")

        self._clock = clock
        self._sweep_interval = sweep_interval_seconds
        self._next_sweep_at = clock() + sweep_interval_seconds
        self._lock = threading.RLock()
        self._records: dict[str, CounterRecord] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _live_record_locked(self, key: str, now: float) -> CounterRecord | None:
        record = self._records.get(key)
        if record is not None and record.expires_at <= now:
            del self._records[key]
            return None
        return record

    def increment(self, key: str, *, amount: int = 1, ttl_seconds: float) -> int:
        """Add ``amount`` to the counter at ``key``, opening a window if needed.

        Raises:
            ValueError: If key is empty, amount < 1 or ttl_seconds <= 0.
        """
        if not key:
            raise ValueError("key must be a non-empty string")
        if amount < 1:
            raise ValueError("amount must be >= 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")

        with self._lock:
            now = self._clock()
            if now >= self._next_sweep_at:
                self._evict_expired_locked(now)
                self._next_sweep_at = now + self._sweep_interval
            record = self._live_record_locked(key, now)
            if record is None:
                record = CounterRecord(
                    count=0,
                    window_start=now,
                    expires_at=now + ttl_seconds,
                )
                self._records[key] = record
            record.count += amount
            count = record.count

        logger.debug(
            "counter_store.increment",
            extra={"store": self.name, "limiter_key": key, "count": count},
        )
        return count

    def ttl(self, key: str) -> float | None:
        with self._lock:
            now = self._clock()
            record = self._live_record_locked(key, now)
            if record is None:
                return None
            return record.expires_at - now

    def sweep(self) -> int:
        """Drop every expired record.

        Returns:
            Number of records removed.
        """
        with self._lock:
            return self._evict_expired_locked(self._clock())

    def clear(self) -> None:
        """Remove all records."""
        with self._lock:
            self._records.clear()

    def _evict_expired_locked(self, now: float) -> int:
        expired = [k for k, r in self._records.items() if r.expires_at <= now]
        for key in expired:
            del self._records[key]
        return len(expired)
