"""Redis-backed counter store shared by every worker process.

Increment and expiry run inside one Lua script, so Redis executes them
atomically: no client-side lock is needed and two processes cannot both see
a fresh key and race on setting its expiry.
"""

from __future__ import annotations

import logging
import math

from redis import Redis
from redis.exceptions import RedisError

from job_throttler.core.errors import StoreUnavailableAppError

logger = logging.getLogger(__name__)


# KEYS[1] = limiter key
# ARGV[1] = amount, ARGV[2] = window length in milliseconds
_INCREMENT_LUA = """
local count = redis.call('INCRBY', KEYS[1], ARGV[1])
if redis.call('PTTL', KEYS[1]) < 0 then
  redis.call('PEXPIRE', KEYS[1], ARGV[2])
end
return count
"""


class RedisCounterStore:
    """Counter store using INCRBY + PEXPIRE in a single server-side script.

    Connection and timeout failures surface as StoreUnavailableAppError so the
    dispatcher can apply its failure policy; they are never reported as a
    count.
    """

    name = "redis"

    def __init__(self, client: Redis) -> None:
        """Initialize the store.

        Args:
            client: redis-py client. Its socket timeouts bound every call.
        """
        self._client = client
        self._increment_script = client.register_script(_INCREMENT_LUA)

    @classmethod
    def from_url(
        cls,
        url: str,
        *,
        socket_timeout: float | None = None,
        socket_connect_timeout: float | None = None,
    ) -> "RedisCounterStore":
        """Build a store from a redis:// URL."""
        client = Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_connect_timeout,
        )
        return cls(client)

    def _unavailable(self, operation: str, key: str, exc: RedisError) -> StoreUnavailableAppError:
        logger.warning(
            "counter_store.unavailable",
            extra={
                "store": self.name,
                "operation": operation,
                "limiter_key": key,
                "error_type": type(exc).__name__,
            },
        )
        return StoreUnavailableAppError(
            code="store_unavailable",
            message=f"Redis counter store failed during {operation}: {exc}",
            details={"store": self.name, "error_type": type(exc).__name__},
        )

    def increment(self, key: str, *, amount: int = 1, ttl_seconds: float) -> int:
        if not key:
            raise ValueError("key must be a non-empty string")
        if amount < 1:
            raise ValueError("amount must be >= 1")
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")

        ttl_ms = max(1, int(math.ceil(ttl_seconds * 1000)))
        try:
            count = self._increment_script(keys=[key], args=[amount, ttl_ms])
        except RedisError as exc:
            raise self._unavailable("increment", key, exc) from exc

        logger.debug(
            "counter_store.increment",
            extra={"store": self.name, "limiter_key": key, "count": int(count)},
        )
        return int(count)

    def ttl(self, key: str) -> float | None:
        try:
            remaining_ms = self._client.pttl(key)
        except RedisError as exc:
            raise self._unavailable("ttl", key, exc) from exc

        # -2: no such key, -1: key without expiry
        if remaining_ms is None or int(remaining_ms) < 0:
            return None
        return int(remaining_ms) / 1000.0
