# src/cache/base_cache_store.py — v1
"""Abstract search cache interface.

Backends implement raw ``get``/``put`` by key and enforce expiry with their
own time-to-live mechanism. ``lookup`` additionally refuses any entry past
its TTL, so a backend that expires lazily never serves a stale list.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from docsearch.cache.fingerprint import cache_key
from docsearch.cache.models import SearchCacheEntry, utcnow

DEFAULT_TTL_SECONDS = 3600


class BaseSearchCacheStore(ABC):
    """Time-expiring store of ranked search results."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    @abstractmethod
    async def get(self, key: str) -> SearchCacheEntry | None:
        """Retrieve the entry stored under ``key``."""

    @abstractmethod
    async def put(self, key: str, entry: SearchCacheEntry) -> None:
        """Store ``entry`` under ``key`` with the configured TTL."""

    async def lookup(
        self,
        collection_name: str,
        query: Sequence[str],
        conditions: str | None = None,
        order: str | None = None,
    ) -> list[Any] | None:
        """Cached ordered ids, or None when absent or expired."""
        entry = await self.get(cache_key(collection_name, query, conditions, order))
        if entry is None or entry.is_expired(self._ttl_seconds, self._clock()):
            return None
        return list(entry.results)

    async def store(
        self,
        collection_name: str,
        query: Sequence[str],
        results: Sequence[Any],
        conditions: str | None = None,
        order: str | None = None,
    ) -> SearchCacheEntry:
        """Record a result list. Concurrent duplicates are allowed; last write wins."""
        entry = SearchCacheEntry(
            collection_name=collection_name,
            query=list(query),
            conditions=conditions,
            order=order,
            results=list(results),
            created_at=self._clock(),
        )
        await self.put(cache_key(collection_name, query, conditions, order), entry)
        return entry
