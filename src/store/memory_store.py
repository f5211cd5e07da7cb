# src/store/memory_store.py — v1
"""In-process document store (DOCUMENT_STORE_BACKEND=memory).

Collections are dicts keyed by ``_id``. Documents are deep-copied on the
way in and out so callers never share state with the store.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from docsearch.store.base_document_store import BaseDocumentStore
from docsearch.store.query import (
    apply_projection,
    matches,
    normalize_projection,
    normalize_sort,
    run_pipeline,
    sort_documents,
)

logger = logging.getLogger(__name__)


class MemoryDocumentStore(BaseDocumentStore):
    """Document store held in process memory."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[Any, dict[str, Any]]] = {}
        self._indexes: dict[str, set[str]] = {}

    def _documents(self, collection: str) -> dict[Any, dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
        projection: Any = None,
        *,
        sort: Any = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        docs = [
            doc for doc in self._documents(collection).values()
            if matches(doc, filter)
        ]
        docs = sort_documents(docs, normalize_sort(sort))
        end = None if limit is None else skip + limit
        fields = normalize_projection(projection)
        return [apply_projection(doc, fields) for doc in docs[skip:end]]

    async def aggregate(
        self, collection: str, pipeline: Sequence[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        docs = copy.deepcopy(list(self._documents(collection).values()))
        return run_pipeline(docs, pipeline)

    async def count(
        self, collection: str, filter: Mapping[str, Any] | None = None
    ) -> int:
        return sum(
            1 for doc in self._documents(collection).values() if matches(doc, filter)
        )

    async def save(self, collection: str, document: Mapping[str, Any]) -> None:
        if "_id" not in document:
            raise ValueError("Document must carry an _id to be saved")
        self._documents(collection)[document["_id"]] = copy.deepcopy(dict(document))

    async def delete_many(
        self, collection: str, filter: Mapping[str, Any] | None = None
    ) -> int:
        docs = self._documents(collection)
        doomed = [key for key, doc in docs.items() if matches(doc, filter)]
        for key in doomed:
            del docs[key]
        return len(doomed)

    async def ensure_index(self, collection: str, field: str) -> None:
        """Record the index; lookups stay linear scans."""
        self._indexes.setdefault(collection, set()).add(field)
        logger.debug("Index registered on %s.%s", collection, field)

    def indexes(self, collection: str) -> set[str]:
        """Fields registered through ensure_index()."""
        return set(self._indexes.get(collection, set()))

    @property
    def provider_name(self) -> str:
        return "memory"
