# tests/integration/cache/test_int_cache_stores.py — v1
"""Integration tests for search cache backends: Redis + ArangoDB.

Requires Docker; skipped otherwise.
"""

from __future__ import annotations

import pytest


@pytest.mark.redis
class TestRedisSearchCacheStore:
    @pytest.mark.asyncio
    async def test_store_and_lookup(self, redis_search_cache):
        await redis_search_cache.store("articles", ["object"], ["b", "a"], '{"x":1}')
        assert await redis_search_cache.lookup("articles", ["object"], '{"x":1}') == ["b", "a"]
        assert await redis_search_cache.lookup("articles", ["object"]) is None

    @pytest.mark.asyncio
    async def test_key_has_ttl(self, redis_search_cache):
        await redis_search_cache.store("articles", ["object"], ["a"])
        [key] = redis_search_cache._client.keys("docsearch:search:*")
        assert 0 < redis_search_cache._client.ttl(key) <= 60

    @pytest.mark.asyncio
    async def test_overwrite(self, redis_search_cache):
        await redis_search_cache.store("articles", ["object"], ["a"])
        await redis_search_cache.store("articles", ["object"], ["b"])
        assert await redis_search_cache.lookup("articles", ["object"]) == ["b"]


@pytest.mark.arangodb
class TestArangoSearchCacheStore:
    @pytest.mark.asyncio
    async def test_store_and_lookup(self, arangodb_search_cache):
        await arangodb_search_cache.store("articles", ["object", "car"], ["b", "a"])
        assert await arangodb_search_cache.lookup("articles", ["car", "object"]) == ["b", "a"]

    @pytest.mark.asyncio
    async def test_miss(self, arangodb_search_cache):
        assert await arangodb_search_cache.lookup("articles", ["none"]) is None

    @pytest.mark.asyncio
    async def test_ttl_index_created(self, arangodb_search_cache):
        db = arangodb_search_cache._db
        indexes = db.collection(arangodb_search_cache._collection_name).indexes()
        assert any(i["type"] == "ttl" and i["fields"] == ["created_at"] for i in indexes)
