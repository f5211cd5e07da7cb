# src/store/base_document_store.py — v1
"""Abstract document store interface.

Documents are plain dicts identified by ``_id``. Filters, projections, sort
specs and aggregation pipelines use the language of ``store.query``.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

from docsearch.store.query import MISSING, get_path, is_inclusive, normalize_projection, set_path


class BaseDocumentStore(ABC):
    """Unified interface for document storage backends."""

    # --- Reads ---

    @abstractmethod
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
        """Return matching documents, projected, sorted and sliced."""

    @abstractmethod
    async def aggregate(
        self, collection: str, pipeline: Sequence[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Run an aggregation pipeline over the collection."""

    @abstractmethod
    async def count(
        self, collection: str, filter: Mapping[str, Any] | None = None
    ) -> int:
        """Count matching documents."""

    # --- Writes ---

    @abstractmethod
    async def save(self, collection: str, document: Mapping[str, Any]) -> None:
        """Insert or replace a document by ``_id``."""

    @abstractmethod
    async def delete_many(
        self, collection: str, filter: Mapping[str, Any] | None = None
    ) -> int:
        """Delete matching documents. Returns count deleted."""

    # --- Schema ---

    @abstractmethod
    async def ensure_index(self, collection: str, field: str) -> None:
        """Create a secondary index on ``field`` if missing.

        A ``[*]`` suffix (``_keywords[*]``) marks an array-valued field whose
        elements are indexed individually.
        """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (memory, arangodb)."""

    # --- References ---

    async def populate(
        self,
        documents: list[dict[str, Any]],
        path: str,
        collection: str,
        projection: Any = None,
    ) -> list[dict[str, Any]]:
        """Replace the reference id(s) at ``path`` with the referenced documents.

        Scalar references resolve to a document (or None when dangling);
        list references resolve to the list of documents found, in order.
        Documents are modified in place and also returned.
        """
        referenced_ids: set[Any] = set()
        for document in documents:
            value = get_path(document, path)
            if value is MISSING or value is None:
                continue
            if isinstance(value, list):
                referenced_ids.update(value)
            else:
                referenced_ids.add(value)
        if not referenced_ids:
            return documents

        fetch_projection, keep_id = _with_id(normalize_projection(projection))
        referenced = await self.find(
            collection,
            {"_id": {"$in": sorted(referenced_ids, key=str)}},
            fetch_projection,
        )
        by_id = {doc["_id"]: doc for doc in referenced}
        if not keep_id:
            by_id = {
                key: {k: v for k, v in doc.items() if k != "_id"}
                for key, doc in by_id.items()
            }

        for document in documents:
            value = get_path(document, path)
            if value is MISSING or value is None:
                continue
            if isinstance(value, list):
                resolved: Any = [
                    copy.deepcopy(by_id[v]) for v in value if v in by_id
                ]
            else:
                resolved = copy.deepcopy(by_id.get(value))
            set_path(document, path, resolved)
        return documents


def _with_id(projection: dict[str, int] | None) -> tuple[dict[str, int] | None, bool]:
    """Force ``_id`` into a projection, reporting whether the caller wanted it."""
    if not projection:
        return projection, True
    keep_id = bool(projection.get("_id", 1))
    adjusted = dict(projection)
    if is_inclusive(adjusted):
        adjusted["_id"] = 1
    else:
        adjusted.pop("_id", None)
    return adjusted, keep_id
