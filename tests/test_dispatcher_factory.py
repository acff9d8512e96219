"""Tests for building a dispatcher from settings."""

from unittest.mock import Mock

from job_throttler.adapters.counter_store.in_memory import InMemoryCounterStore
from job_throttler.core.config import ThrottlerSettings
from job_throttler.schemas.verdict import Exceeded
from job_throttler.services.dispatcher import FailurePolicy, Job
from job_throttler.services.factory import create_dispatcher
from job_throttler.services.registry import QuotaRegistry


def test_policy_comes_from_settings() -> None:
    dispatcher = create_dispatcher(
        QuotaRegistry(),
        throttler_settings=ThrottlerSettings(storage="memory", failure_policy="closed"),
    )

    assert dispatcher.failure_policy is FailurePolicy.CLOSED


def test_explicit_store_is_used() -> None:
    store = InMemoryCounterStore()
    registry = QuotaRegistry({"ReportWorker": {"limit": 1, "period": 60}})
    dispatcher = create_dispatcher(
        registry,
        store=store,
        throttler_settings=ThrottlerSettings(key_prefix="jobs"),
    )
    defer = Mock()

    dispatcher.dispatch(Job("ReportWorker"), Mock(), defer)
    verdict = dispatcher.dispatch(Job("ReportWorker"), Mock(), defer)

    assert isinstance(verdict, Exceeded)
    assert verdict.key.startswith("jobs:ReportWorker:")
    assert len(store) == 1
