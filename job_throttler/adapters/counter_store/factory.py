"""Factory for creating counter store instances."""

from __future__ import annotations

import logging

from job_throttler.adapters.counter_store.base import CounterStore
from job_throttler.adapters.counter_store.in_memory import InMemoryCounterStore
from job_throttler.adapters.counter_store.redis_store import RedisCounterStore
from job_throttler.core.config import ThrottlerSettings, settings
from job_throttler.core.errors import ConfigurationAppError

logger = logging.getLogger(__name__)


def create_counter_store(throttler_settings: ThrottlerSettings | None = None) -> CounterStore:
    """Instantiate the counter store selected by configuration.

    Args:
        throttler_settings: Optional settings; defaults to the global settings.

    Returns:
        CounterStore: Configured store instance.

    Raises:
        ConfigurationAppError: If backend-specific requirements are not met.
    """
    cfg = throttler_settings or settings.throttler
    storage = cfg.storage.lower()

    if storage == "memory":
        return InMemoryCounterStore()

    if storage == "redis":
        if not cfg.redis_url:
            raise ConfigurationAppError(
                code="store_missing_redis_url",
                message="Redis storage requires THROTTLER_REDIS_URL environment variable",
                details={"store": "redis", "field": "redis_url"},
            )
        logger.info(
            "counter_store.created",
            extra={
                "store": "redis",
                "redis_url": cfg.redis_url,
                "socket_timeout_s": cfg.redis_socket_timeout_seconds,
            },
        )
        return RedisCounterStore.from_url(
            cfg.redis_url,
            socket_timeout=cfg.redis_socket_timeout_seconds,
            socket_connect_timeout=cfg.redis_connect_timeout_seconds,
        )

    raise ConfigurationAppError(
        code="store_unknown_backend",
        message=f"Unknown counter store: '{storage}'. Supported stores: memory, redis",
        details={"field": "storage"},
    )
