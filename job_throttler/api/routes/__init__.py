from __future__ import annotations

from job_throttler.api.routes.health import router as health_router
from job_throttler.api.routes.quotas import router as quotas_router

__all__ = ["health_router", "quotas_router"]
