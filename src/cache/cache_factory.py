# src/cache/cache_factory.py — v1
"""Factory for search cache instantiation."""

from __future__ import annotations

from docsearch.cache.base_cache_store import BaseSearchCacheStore
from docsearch.config.settings import Settings


def create_search_cache(settings: Settings | None = None) -> BaseSearchCacheStore:
    """Instantiate the configured search cache backend.

    Args:
        settings: Application settings. Defaults to the in-memory backend
            with a one hour TTL.

    Returns:
        Configured BaseSearchCacheStore implementation.
    """
    backend = "memory" if settings is None else settings.search_cache_backend
    ttl_seconds = 3600 if settings is None else settings.search_cache_ttl_seconds

    if backend == "memory":
        from docsearch.cache.memory_store import MemorySearchCacheStore
        return MemorySearchCacheStore(ttl_seconds=ttl_seconds)

    if backend == "redis":
        from docsearch.cache.redis_store import RedisSearchCacheStore
        if settings is None or not settings.search_cache_redis_url:
            raise ValueError(
                "SEARCH_CACHE_REDIS_URL must be set when SEARCH_CACHE_BACKEND=redis"
            )
        return RedisSearchCacheStore(
            redis_url=settings.search_cache_redis_url, ttl_seconds=ttl_seconds,
        )

    if backend == "arangodb":
        from docsearch.cache.arangodb_store import ArangoSearchCacheStore
        return ArangoSearchCacheStore(
            url=settings.arangodb_url,
            database=settings.arangodb_database,
            user=settings.arangodb_user,
            password=settings.arangodb_password,
            collection=settings.search_cache_collection,
            ttl_seconds=ttl_seconds,
        )

    raise ValueError(f"Unsupported search cache backend: {backend!r}")
