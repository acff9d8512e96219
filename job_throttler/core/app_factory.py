"""Application factory for the throttler inspection API.

Exposes store health and the registered quotas for the worker processes that
share a counter store.
"""

from __future__ import annotations

from fastapi import FastAPI

from job_throttler.adapters.counter_store.base import CounterStore
from job_throttler.adapters.counter_store.factory import create_counter_store
from job_throttler.api.routes import health_router, quotas_router
from job_throttler.core.config import settings
from job_throttler.core.exception_handlers import setup_exception_handlers
from job_throttler.core.logging import configure_logging
from job_throttler.services.registry import QuotaRegistry


def create_app(
    registry: QuotaRegistry,
    store: CounterStore | None = None,
    *,
    key_prefix: str | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        registry: Quotas to expose under /v1/quotas.
        store: Counter store to check; created from settings when omitted.
        key_prefix: Limiter key namespace the store check reads under;
            defaults to the configured prefix.
        configure_logs: Whether to install the root log handler.

    Returns:
        Configured FastAPI app with handlers and routers.
    """
    if configure_logs:
        configure_logging(settings.log)

    app = FastAPI(
        title="Job Throttler",
        description="Counter store health and registered job quotas.",
        version="0.1.0",
    )
    app.state.quota_registry = registry
    app.state.counter_store = store if store is not None else create_counter_store()
    app.state.key_prefix = key_prefix or settings.throttler.key_prefix

    setup_exception_handlers(app)

    app.include_router(quotas_router, prefix="/v1")
    app.include_router(health_router)

    return app
