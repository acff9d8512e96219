"""Tests for the rate limit decision engine."""

import threading
from unittest.mock import MagicMock

import pytest

from job_throttler.adapters.counter_store.in_memory import InMemoryCounterStore
from job_throttler.core.errors import StoreUnavailableAppError
from job_throttler.schemas.quota import LimiterIdentity, Per, Quota
from job_throttler.schemas.verdict import Exceeded, WithinBounds
from job_throttler.services.engine import RateLimitEngine


IDENTITY = LimiterIdentity(worker_type="ReportWorker", args=(1,), queue="default")


@pytest.fixture
def store(fake_time) -> InMemoryCounterStore:
    return InMemoryCounterStore(clock=fake_time)


@pytest.fixture
def engine(store: InMemoryCounterStore) -> RateLimitEngine:
    return RateLimitEngine(store)


def test_limit_calls_within_bounds_then_exceeded(engine: RateLimitEngine) -> None:
    quota = Quota(limit=5, period=60)

    verdicts = [engine.check(IDENTITY, quota) for _ in range(5)]
    assert all(isinstance(v, WithinBounds) for v in verdicts)
    assert [v.count for v in verdicts] == [1, 2, 3, 4, 5]

    assert isinstance(engine.check(IDENTITY, quota), Exceeded)


def test_window_scenario(engine: RateLimitEngine, fake_time) -> None:
    quota = Quota(limit=3, period=60)

    for _ in range(3):
        assert isinstance(engine.check(IDENTITY, quota), WithinBounds)
        fake_time.advance(2)

    exceeded = engine.check(IDENTITY, quota)
    assert isinstance(exceeded, Exceeded)
    assert exceeded.delay == pytest.approx(54.0)
    assert exceeded.count == 4

    fake_time.advance(61)
    fresh = engine.check(IDENTITY, quota)
    assert isinstance(fresh, WithinBounds)
    assert fresh.count == 1


def test_delay_is_positive_and_at_most_period(engine: RateLimitEngine, fake_time) -> None:
    quota = Quota(limit=1, period=10)
    engine.check(IDENTITY, quota)

    for _ in range(9):
        verdict = engine.check(IDENTITY, quota)
        assert isinstance(verdict, Exceeded)
        assert 0 < verdict.delay <= quota.period
        fake_time.advance(1)


def test_delay_falls_back_to_period_when_record_vanished() -> None:
    store = MagicMock()
    store.increment.return_value = 2
    store.ttl.return_value = None
    engine = RateLimitEngine(store)

    verdict = engine.check(IDENTITY, Quota(limit=1, period=30))

    assert verdict == Exceeded(delay=30, count=2, key=verdict.key)


def test_delay_is_capped_at_period() -> None:
    store = MagicMock()
    store.increment.return_value = 2
    store.ttl.return_value = 120.0
    engine = RateLimitEngine(store)

    verdict = engine.check(IDENTITY, Quota(limit=1, period=30))

    assert isinstance(verdict, Exceeded)
    assert verdict.delay == 30


def test_cost_consumes_multiple_units(engine: RateLimitEngine) -> None:
    quota = Quota(limit=5, period=60, cost=2)

    assert engine.check(IDENTITY, quota).count == 2
    assert engine.check(IDENTITY, quota).count == 4
    assert isinstance(engine.check(IDENTITY, quota), Exceeded)


def test_increment_uses_period_as_ttl_and_prefix() -> None:
    store = MagicMock()
    store.increment.return_value = 1
    engine = RateLimitEngine(store, key_prefix="jobs")

    verdict = engine.check(IDENTITY, Quota(limit=1, period=45, cost=1))

    key = store.increment.call_args.args[0]
    assert key.startswith("jobs:ReportWorker:")
    store.increment.assert_called_once_with(key, amount=1, ttl_seconds=45)
    store.ttl.assert_not_called()
    assert verdict == WithinBounds(count=1, key=key)


def test_store_failure_propagates() -> None:
    store = MagicMock()
    store.increment.side_effect = StoreUnavailableAppError(
        code="store_unavailable", message="down"
    )
    engine = RateLimitEngine(store)

    with pytest.raises(StoreUnavailableAppError):
        engine.check(IDENTITY, Quota(limit=1, period=30))


def test_per_worker_shares_counter_across_args(engine: RateLimitEngine) -> None:
    quota = Quota(limit=1, period=60, per=Per.WORKER)
    a = LimiterIdentity(worker_type="ReportWorker", args=(1,))
    b = LimiterIdentity(worker_type="ReportWorker", args=(2,))

    assert isinstance(engine.check(a, quota), WithinBounds)
    assert isinstance(engine.check(b, quota), Exceeded)


def test_per_args_keeps_independent_counters(engine: RateLimitEngine) -> None:
    quota = Quota(limit=1, period=60, per=Per.ARGS)
    a = LimiterIdentity(worker_type="ReportWorker", args=(1,))
    b = LimiterIdentity(worker_type="ReportWorker", args=(2,))

    assert isinstance(engine.check(a, quota), WithinBounds)
    assert isinstance(engine.check(b, quota), WithinBounds)
    assert isinstance(engine.check(a, quota), Exceeded)


def test_concurrent_checks_admit_exactly_limit() -> None:
    engine = RateLimitEngine(InMemoryCounterStore())
    quota = Quota(limit=10, period=60)
    callers = 50
    barrier = threading.Barrier(callers)
    verdicts = []
    verdicts_lock = threading.Lock()

    def call() -> None:
        barrier.wait()
        verdict = engine.check(IDENTITY, quota)
        with verdicts_lock:
            verdicts.append(verdict)

    threads = [threading.Thread(target=call) for _ in range(callers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    within = [v for v in verdicts if isinstance(v, WithinBounds)]
    exceeded = [v for v in verdicts if isinstance(v, Exceeded)]
    assert len(within) == 10
    assert len(exceeded) == callers - 10
    assert sorted(v.count for v in verdicts) == list(range(1, callers + 1))
