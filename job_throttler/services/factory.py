"""Wiring of store, engine and dispatcher from settings."""

from __future__ import annotations

from job_throttler.adapters.counter_store.base import CounterStore
from job_throttler.adapters.counter_store.factory import create_counter_store
from job_throttler.core.config import ThrottlerSettings, settings
from job_throttler.services.dispatcher import BatchLookup, Dispatcher
from job_throttler.services.engine import RateLimitEngine
from job_throttler.services.registry import QuotaRegistry


def create_dispatcher(
    registry: QuotaRegistry,
    *,
    store: CounterStore | None = None,
    throttler_settings: ThrottlerSettings | None = None,
    batch_lookup: BatchLookup | None = None,
) -> Dispatcher:
    """Build a dispatcher for the given registry.

    Quotas must be registered before this is called; the store is created
    from configuration unless one is passed in.

    Args:
        registry: Quotas by worker type.
        store: Optional counter store overriding the configured backend.
        throttler_settings: Optional settings; defaults to the global settings.
        batch_lookup: Optional batch resolver used when deferring jobs.

    Returns:
        Dispatcher: Ready-to-use dispatcher.

    Raises:
        ConfigurationAppError: If the configured store is invalid.
    """
    cfg = throttler_settings or settings.throttler
    engine = RateLimitEngine(
        store if store is not None else create_counter_store(cfg),
        key_prefix=cfg.key_prefix,
    )
    return Dispatcher(
        registry,
        engine,
        failure_policy=cfg.failure_policy,
        batch_lookup=batch_lookup,
    )
