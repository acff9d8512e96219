"""Tests for the inspection API (health and quota listing)."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from job_throttler.adapters.counter_store.in_memory import InMemoryCounterStore
from job_throttler.core.app_factory import create_app
from job_throttler.core.config import settings
from job_throttler.core.errors import StoreUnavailableAppError
from job_throttler.services.registry import QuotaRegistry


@pytest.fixture
def registry() -> QuotaRegistry:
    return QuotaRegistry(
        {
            "ReportWorker": {"limit": 5, "period": 60, "per": "queue"},
            "EmailWorker": {"limit": 100, "period": 3600, "cost": 2},
        }
    )


def test_health(registry: QuotaRegistry) -> None:
    client = TestClient(create_app(registry, InMemoryCounterStore(), configure_logs=False))

    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_store_health_ok(registry: QuotaRegistry) -> None:
    client = TestClient(create_app(registry, InMemoryCounterStore(), configure_logs=False))

    resp = client.get("/health/store")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "store": "memory"}


def test_store_health_unavailable_returns_503(registry: QuotaRegistry) -> None:
    store = MagicMock()
    store.name = "redis"
    store.ttl.side_effect = StoreUnavailableAppError(
        code="store_unavailable",
        message="Redis counter store failed during ttl: refused",
        details={"store": "redis"},
    )
    client = TestClient(create_app(registry, store, configure_logs=False))

    resp = client.get("/health/store")

    assert resp.status_code == 503
    error = resp.json()["error"]
    assert error["code"] == "store_unavailable"
    assert error["details"] == {"store": "redis"}


def test_lists_quotas_sorted(registry: QuotaRegistry) -> None:
    client = TestClient(create_app(registry, InMemoryCounterStore(), configure_logs=False))

    resp = client.get("/v1/quotas")

    assert resp.status_code == 200
    assert resp.json() == [
        {"worker_type": "EmailWorker", "limit": 100, "period": 3600.0, "per": "worker", "cost": 2},
        {"worker_type": "ReportWorker", "limit": 5, "period": 60.0, "per": "queue", "cost": 1},
    ]


def test_store_check_reads_under_configured_prefix(registry: QuotaRegistry) -> None:
    store = MagicMock()
    store.name = "redis"
    store.ttl.return_value = None
    client = TestClient(create_app(registry, store, key_prefix="jobs", configure_logs=False))

    resp = client.get("/health/store")

    assert resp.status_code == 200
    store.ttl.assert_called_once_with("jobs:health:check")


def test_store_check_defaults_to_settings_prefix(registry: QuotaRegistry) -> None:
    store = MagicMock()
    store.name = "redis"
    store.ttl.return_value = None
    client = TestClient(create_app(registry, store, configure_logs=False))

    client.get("/health/store")

    store.ttl.assert_called_once_with(f"{settings.throttler.key_prefix}:health:check")
