"""Throttling services: key derivation, decision engine, registry and dispatcher."""

from job_throttler.services.dispatcher import Batch, BatchLookup, Dispatcher, FailurePolicy, Job
from job_throttler.services.engine import RateLimitEngine
from job_throttler.services.factory import create_dispatcher
from job_throttler.services.key_builder import build_limiter_key
from job_throttler.services.registry import QuotaRegistry, worker_type_of

__all__ = [
    "Batch",
    "BatchLookup",
    "Dispatcher",
    "FailurePolicy",
    "Job",
    "QuotaRegistry",
    "RateLimitEngine",
    "build_limiter_key",
    "create_dispatcher",
    "worker_type_of",
]
