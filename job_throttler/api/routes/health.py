from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])

# Never written; only read to exercise a store round trip
STORE_CHECK_SUFFIX = "health:check"


def store_check_key(key_prefix: str) -> str:
    return f"{key_prefix}:{STORE_CHECK_SUFFIX}"


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Returns:
        dict: A dictionary with a single "status" key set to "ok".
    """

    return {"status": "ok"}


@router.get("/health/store")
def store_health_check(request: Request) -> dict:
    """Counter store reachability check.

    Performs one read-only TTL lookup against the configured store. A store
    outage raises StoreUnavailableAppError, which the exception handlers map
    to 503.

    Returns:
        dict: "status" and the store backend name.
    """

    store = request.app.state.counter_store
    store.ttl(store_check_key(request.app.state.key_prefix))
    return {"status": "ok", "store": store.name}
