"""Quota configuration and limiter identity models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Per(str, Enum):
    """How widely a quota's counter is shared."""

    WORKER = "worker"
    QUEUE = "queue"
    ARGS = "argument-set"


class Quota(BaseModel):
    """Throttle configuration attached to a worker type."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    limit: int = Field(
        ..., ge=1, description="Maximum units allowed per period."
    )
    period: float = Field(
        ..., gt=0, description="Window length in seconds."
    )
    per: Per = Field(
        default=Per.WORKER,
        description="Counter scope: worker type, worker type + queue, or argument set.",
    )
    cost: int = Field(
        default=1, ge=1, description="Units consumed by a single call."
    )
    key_fn: Callable[..., Any] | None = Field(
        default=None,
        exclude=True,
        description=(
            "Optional mapping from job arguments to the value folded into the key "
            "when per=argument-set (e.g. only the account id)."
        ),
    )

    @model_validator(mode="after")
    def _cost_fits_limit(self) -> "Quota":
        # A call costing more than the limit could never be admitted
        if self.cost > self.limit:
            raise ValueError(f"cost ({self.cost}) must not exceed limit ({self.limit})")
        return self


@dataclass(frozen=True)
class LimiterIdentity:
    """Inputs a limiter key is derived from. Rebuilt for every call."""

    worker_type: str
    args: tuple[Any, ...] = field(default_factory=tuple)
    queue: str = "default"
