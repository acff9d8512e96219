"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that might load settings,
so tests never pick up a developer's .env file or a real Redis URL.
"""

import os

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("THROTTLER_STORAGE", "memory")
os.environ.setdefault("THROTTLER_FAILURE_POLICY", "open")

import pytest  # noqa: E402


class FakeTime:
    """Deterministic clock used to test window expiry."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.current = start

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()
