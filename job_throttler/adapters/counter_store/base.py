"""Counter store interface.

The engine depends on this capability (not on a concrete backend) so the
same limiting logic runs against an in-process dict or a shared Redis
instance. Any object with these members satisfies it; tests can pass a
trivial fake without subclassing anything.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CounterStore(Protocol):
    """Atomic increment-with-expiry and TTL lookup over string keys."""

    name: str

    def increment(self, key: str, *, amount: int = 1, ttl_seconds: float) -> int:
        """Atomically add ``amount`` to the counter at ``key``.

        The first increment of a window creates the record and sets its
        expiry to ``ttl_seconds``; later increments in the same window leave
        the expiry untouched.

        Args:
            key: Limiter key.
            amount: Units to add (>= 1).
            ttl_seconds: Window length applied when the record is created.

        Returns:
            The counter value after the increment.

        Raises:
            StoreUnavailableAppError: If the backend cannot be reached.
        """
        ...

    def ttl(self, key: str) -> float | None:
        """Return seconds until ``key`` expires, or None when there is no record.

        Raises:
            StoreUnavailableAppError: If the backend cannot be reached.
        """
        ...
