# src/cache/fingerprint.py — v1
"""Canonical serialization and cache keys for search results.

Two searches share a cache entry when they target the same collection,
reduce to the same set of stems, and carry the same conditions and sort
order once canonically serialized.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from typing import Any

from docsearch.store.query import normalize_sort


def stable_stringify(value: Any) -> str:
    """Deterministic JSON: sorted keys, compact separators."""
    return json.dumps(
        value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str,
    )


def conditions_fingerprint(conditions: Any) -> str | None:
    """Serialize extra filter conditions; None when there are none."""
    if not conditions:
        return None
    return stable_stringify(conditions)


def sort_fingerprint(sort: Any) -> str | None:
    """Serialize an external sort order; None when ranking by relevance."""
    spec = normalize_sort(sort)
    if not spec:
        return None
    return stable_stringify(spec)


def normalize_query(stems: Iterable[str]) -> list[str]:
    """Stems as a set: unique and order-independent."""
    return sorted(set(stems))


def cache_key(
    collection_name: str,
    query: Iterable[str],
    conditions: str | None = None,
    order: str | None = None,
) -> str:
    """SHA-256 over the canonical key tuple."""
    payload = stable_stringify(
        [collection_name, normalize_query(query), conditions, order]
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
