# src/cache/memory_store.py — v1
"""In-process search cache (SEARCH_CACHE_BACKEND=memory).

Entries past their TTL are dropped when read.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from docsearch.cache.base_cache_store import DEFAULT_TTL_SECONDS, BaseSearchCacheStore
from docsearch.cache.models import SearchCacheEntry, utcnow

logger = logging.getLogger(__name__)


class MemorySearchCacheStore(BaseSearchCacheStore):
    """Dict-backed cache with read-time expiry."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(ttl_seconds, clock)
        self._entries: dict[str, SearchCacheEntry] = {}

    async def get(self, key: str) -> SearchCacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.ttl_seconds, self._clock()):
            del self._entries[key]
            logger.debug("Evicted expired search cache entry %s", key)
            return None
        return entry.model_copy(deep=True)

    async def put(self, key: str, entry: SearchCacheEntry) -> None:
        self._entries[key] = entry.model_copy(deep=True)

    def __len__(self) -> int:
        return len(self._entries)
