"""Engine verdicts.

A verdict is returned synchronously by the engine so callers branch on it
directly:

    verdict = engine.check(identity, quota)
    if isinstance(verdict, Exceeded):
        reschedule(verdict.delay)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class WithinBounds:
    """The call fits in the current window and may run now.

    Attributes:
        count: Counter value after this call was recorded (None when the
            verdict was produced by a fail-open policy without a count).
        key: Limiter key the call was recorded against.
    """

    count: int | None = None
    key: str | None = None


@dataclass(frozen=True)
class Exceeded:
    """The quota is used up; retry after ``delay`` seconds.

    Attributes:
        delay: Seconds until the current window resets (0 < delay <= period).
        count: Counter value after this call was recorded.
        key: Limiter key the call was recorded against.
    """

    delay: float
    count: int | None = None
    key: str | None = None


Verdict = Union[WithinBounds, Exceeded]
