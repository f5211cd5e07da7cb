# src/cache/redis_store.py — v1
"""Redis-based search cache (SEARCH_CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Expiry is delegated to Redis key TTLs (SET ... EX).
Suitable for distributed/multi-instance deployments.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from pydantic import ValidationError

from docsearch.cache.base_cache_store import DEFAULT_TTL_SECONDS, BaseSearchCacheStore
from docsearch.cache.models import SearchCacheEntry, utcnow

logger = logging.getLogger(__name__)

_KEY_PREFIX = "docsearch:search:"


class RedisSearchCacheStore(BaseSearchCacheStore):
    """Redis-backed search cache shared across processes."""

    def __init__(
        self,
        redis_url: str,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(ttl_seconds, clock)
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    async def get(self, key: str) -> SearchCacheEntry | None:
        """Retrieve an entry; connection errors propagate."""
        data = self._client.get(f"{_KEY_PREFIX}{key}")
        if data is None:
            return None
        try:
            return SearchCacheEntry.model_validate_json(data)
        except ValidationError as e:
            logger.warning("Failed to deserialize search cache entry %s: %s", key, e)
            return None

    async def put(self, key: str, entry: SearchCacheEntry) -> None:
        self._client.set(
            f"{_KEY_PREFIX}{key}", entry.model_dump_json(), ex=self.ttl_seconds,
        )

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
