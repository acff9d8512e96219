from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

router = APIRouter(tags=["Quotas"])


class QuotaView(BaseModel):
    """Registered quota as exposed over HTTP."""

    worker_type: str = Field(..., description="Worker type the quota applies to.")
    limit: int = Field(..., description="Maximum units per period.")
    period: float = Field(..., description="Window length in seconds.")
    per: str = Field(..., description="Counter scope: worker, queue or argument-set.")
    cost: int = Field(..., description="Units consumed per call.")


@router.get("/quotas", response_model=list[QuotaView])
def list_quotas(request: Request) -> list[QuotaView]:
    """List every registered quota, sorted by worker type."""

    registry = request.app.state.quota_registry
    return [
        QuotaView(
            worker_type=worker_type,
            limit=quota.limit,
            period=quota.period,
            per=quota.per.value,
            cost=quota.cost,
        )
        for worker_type, quota in sorted(registry.items(), key=lambda item: item[0])
    ]
