"""Limiter key derivation.

Keys are a readable prefix plus a SHA-256 digest of a canonical JSON
encoding of the scoping tuple. Every value is tagged with its type, dict
items and set members are ordered by their own encoding, and sequences stay
JSON arrays, so ("a:b", "c") and ("a", "b:c") or {1: "x"} and {"1": "x"}
never collide, and the same arguments give the same key in every process.
"""

from __future__ import annotations

import json
from hashlib import sha256
from typing import Any, Mapping

from job_throttler.schemas.quota import LimiterIdentity, Per, Quota


def _encode(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _canonical(value: Any) -> Any:
    """Convert a value to a type-tagged, order-independent JSON structure."""
    if value is None:
        return ["none"]
    if isinstance(value, (bool, int, float, str)):
        return [type(value).__name__, value]
    if isinstance(value, bytes):
        return ["bytes", value.hex()]
    if isinstance(value, Mapping):
        items = [[_canonical(k), _canonical(v)] for k, v in value.items()]
        return ["dict", sorted(items, key=_encode)]
    if isinstance(value, (set, frozenset)):
        return ["set", sorted((_canonical(v) for v in value), key=_encode)]
    if isinstance(value, (list, tuple)):
        # Tuples and lists share a tag; serialized job args come back as lists
        return ["list", [_canonical(v) for v in value]]
    cls = type(value)
    return [f"{cls.__module__}.{cls.__qualname__}", str(value)]


def _scope(identity: LimiterIdentity, quota: Quota) -> list[Any]:
    if quota.per is Per.WORKER:
        return [quota.per.value, identity.worker_type]
    if quota.per is Per.QUEUE:
        return [quota.per.value, identity.worker_type, identity.queue]

    args: Any = tuple(identity.args)
    if quota.key_fn is not None:
        args = quota.key_fn(*identity.args)
    return [quota.per.value, identity.worker_type, identity.queue, _canonical(args)]


def build_limiter_key(identity: LimiterIdentity, quota: Quota, *, prefix: str = "throttler") -> str:
    """Build the store key for an identity under a quota.

    The quota's limit and period are part of the digest, so changing a
    worker's quota starts a fresh counter instead of inheriting the old one.

    Args:
        identity: Worker type, arguments and queue of the current call.
        quota: Quota whose ``per`` decides which identity fields are folded in.
        prefix: Namespace for all limiter keys.

    Returns:
        Key of the form ``<prefix>:<worker_type>:<hex digest>``.
    """

    payload = [_scope(identity, quota), quota.limit, quota.period]
    digest = sha256(_encode(payload).encode()).hexdigest()
    return f"{prefix}:{identity.worker_type}:{digest}"
