# src/cache/arangodb_store.py — v1
"""ArangoDB-based search cache (SEARCH_CACHE_BACKEND=arangodb).

Entries live in one shared collection with a TTL index on ``created_at``.
ArangoDB purges expired documents periodically, so reads may still see an
expired entry; the base lookup rejects those.
Requires: pip install python-arango.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from docsearch.cache.base_cache_store import DEFAULT_TTL_SECONDS, BaseSearchCacheStore
from docsearch.cache.models import SearchCacheEntry, utcnow

logger = logging.getLogger(__name__)


class ArangoSearchCacheStore(BaseSearchCacheStore):
    """Search cache stored next to the documents in ArangoDB."""

    def __init__(
        self,
        url: str = "http://localhost:8529",
        database: str = "docsearch",
        user: str = "root",
        password: str = "",
        collection: str = "search_results",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(ttl_seconds, clock)
        try:
            from arango import ArangoClient
        except ImportError as e:
            raise ImportError(
                "python-arango package required: pip install python-arango"
            ) from e

        client = ArangoClient(hosts=url)
        self._db = client.db(database, username=user, password=password)
        self._collection_name = collection
        self._ensure_collection()

    def _ensure_collection(self) -> None:
        """Create the cache collection and its TTL index if missing."""
        if not self._db.has_collection(self._collection_name):
            self._db.create_collection(self._collection_name)
        self._db.collection(self._collection_name).add_index({
            "type": "ttl",
            "fields": ["created_at"],
            "expireAfter": self.ttl_seconds,
        })

    async def get(self, key: str) -> SearchCacheEntry | None:
        doc = self._db.collection(self._collection_name).get(key)
        if doc is None:
            return None
        return SearchCacheEntry(
            **{k: v for k, v in doc.items() if not k.startswith("_")}
        )

    async def put(self, key: str, entry: SearchCacheEntry) -> None:
        body = entry.model_dump(mode="json")
        body["_key"] = key
        self._db.collection(self._collection_name).insert(body, overwrite=True)
