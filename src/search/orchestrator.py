# src/search/orchestrator.py — v1
"""Search orchestration: cache lookup, candidate ranking, paging, fetching.

Pipeline for one call:
  1. Stem the query and build the cache key (collection, stems,
     canonical conditions, sort order).
  2. Cache hit: the cached id list is the full, already ranked result.
  3. Cache miss: find documents whose keywords intersect the stems, rank
     them by relevance unless an external sort was requested, cache the id
     list. The ranking is frozen into the cache entry until it expires, so
     paging stays stable.
  4. Slice the id list with skip/limit.
  5. Fetch the page through an aggregation pipeline or a plain find with
     populate instructions.
  6. Without an external sort, put the page back into ranked order.

Any failing step aborts the call; partial results are never returned.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from docsearch.cache.base_cache_store import BaseSearchCacheStore
from docsearch.cache.fingerprint import conditions_fingerprint, sort_fingerprint
from docsearch.logging.context import clear_context, set_search_context
from docsearch.search.keywords import unique
from docsearch.search.models import (
    DEFAULT_KEYWORDS_PATH,
    DEFAULT_RELEVANCE_PATH,
    SearchOptions,
    SearchResult,
)
from docsearch.search.relevance import RelevanceScorer
from docsearch.store.document import Document
from docsearch.store.query import merge_filters, normalize_sort
from docsearch.text.stemmers import TokenizeAndStem

logger = logging.getLogger(__name__)


def coerce_options(options: SearchOptions | Mapping[str, Any] | None) -> SearchOptions:
    if options is None:
        return SearchOptions()
    if isinstance(options, SearchOptions):
        return options
    return SearchOptions.model_validate(dict(options))


def paginate(ids: Sequence[Any], skip: int | None, limit: int | None) -> list[Any]:
    """Slice the ranked id list; skip defaults to 0, limit to the remainder."""
    start = skip or 0
    if limit is None:
        return list(ids[start:])
    return list(ids[start:start + limit])


def order_by_ids(documents: list[Any], ids: Sequence[Any]) -> list[Any]:
    """Reorder fetched documents by their position in ``ids``.

    Documents whose id is unknown (e.g. dropped by a $project stage) go last.
    """
    position = {doc_id: index for index, doc_id in enumerate(ids)}
    return sorted(
        documents, key=lambda doc: position.get(_document_id(doc), len(position))
    )


def _document_id(document: Any) -> Any:
    if isinstance(document, Document):
        return document.id
    if isinstance(document, Mapping):
        return document.get("_id")
    return None


class SearchOrchestrator:
    """Run keyword searches against one model's collection."""

    def __init__(
        self,
        model: type[Document],
        stemmer: TokenizeAndStem,
        scorer: RelevanceScorer,
        cache: BaseSearchCacheStore,
        keywords_path: str = DEFAULT_KEYWORDS_PATH,
        relevance_path: str = DEFAULT_RELEVANCE_PATH,
    ) -> None:
        self._model = model
        self._stemmer = stemmer
        self._scorer = scorer
        self._cache = cache
        self._keywords_path = keywords_path
        self._relevance_path = relevance_path

    def query_stems(self, query: str) -> list[str]:
        """Unique stems of the query text; may be empty."""
        return unique(self._stemmer(query))

    async def search(
        self,
        query: str,
        fields: Any = None,
        options: SearchOptions | Mapping[str, Any] | None = None,
    ) -> SearchResult:
        """Search the collection.

        Args:
            query: Free text; stemmed and deduplicated.
            fields: Projection applied to the returned documents.
            options: SearchOptions or an equivalent mapping.

        Returns:
            SearchResult with the full match count and the requested page.
        """
        opts = coerce_options(options)
        collection = self._model.collection
        set_search_context(collection, query)
        try:
            stems = self.query_stems(query)
            conditions = conditions_fingerprint(opts.conditions)
            order = sort_fingerprint(opts.sort)

            ids = await self._cache.lookup(collection, stems, conditions, order)
            if ids is None:
                logger.debug("Search cache miss for stems %s", stems)
                ids = await self._find_ranked_ids(stems, opts)
                await self._cache.store(collection, stems, ids, conditions, order)
            else:
                logger.debug("Search cache hit for stems %s (%d ids)", stems, len(ids))

            total_count = len(ids)
            page = paginate(ids, opts.skip, opts.limit)
            documents = await self._fetch(page, fields, opts) if page else []
            if not normalize_sort(opts.sort):
                documents = order_by_ids(documents, page)

            logger.info(
                "Search %r on %s: %d of %d results",
                query, collection, len(documents), total_count,
            )
            return SearchResult(total_count=total_count, results=documents)
        finally:
            clear_context()

    async def _find_ranked_ids(
        self, stems: list[str], opts: SearchOptions
    ) -> list[Any]:
        """Ids of every keyword match, ranked unless an external sort applies."""
        store = self._model.get_store()
        sort = normalize_sort(opts.sort)
        candidates = await store.find(
            self._model.collection,
            merge_filters(opts.conditions, {self._keywords_path: {"$in": stems}}),
            {"_id": 1, self._keywords_path: 1},
            # Fetching in id order makes equal scores tie-break by id.
            sort=sort or [("_id", 1)],
        )
        logger.debug("Found %d keyword candidates", len(candidates))
        if not sort:
            candidates = self._scorer.rank(
                stems, candidates, self._keywords_path, self._relevance_path,
            )
        return [candidate["_id"] for candidate in candidates]

    async def _fetch(
        self, page: list[Any], fields: Any, opts: SearchOptions
    ) -> list[Any]:
        if opts.aggregate:
            pipeline = [
                {"$match": {"_id": {"$in": page}}},
                {"$limit": len(page)},
                *opts.aggregate,
            ]
            return await self._model.get_store().aggregate(
                self._model.collection, pipeline,
            )
        return await self._model.find(
            merge_filters(opts.conditions, {"_id": {"$in": page}}),
            fields,
            sort=opts.sort,
            populate=[(spec.path, spec.fields) for spec in opts.populate],
        )
