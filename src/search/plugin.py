# src/search/plugin.py — v1
"""Attach keyword search to a Document model.

Usage:
    @searchable(fields=["title", "description", "tags"])
    class Article(Document):
        collection = "articles"

    Article.bind(store)
    await Article({"title": "Searching objects"}).save()
    page = await Article.search("object", options={"limit": 10})

Installing the plugin:
  - indexes the keywords attribute (the relevance attribute is informational),
  - adds ``search`` and ``rebuild_all_keywords`` classmethods,
  - adds ``process_keywords`` / ``update_keywords`` instance methods,
  - registers a pre-save hook refreshing keywords for new documents and
    whenever a source field changed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from docsearch.cache.base_cache_store import BaseSearchCacheStore
from docsearch.logging.context import clear_context, set_search_context
from docsearch.search.keywords import KeywordExtractor
from docsearch.search.models import (
    DEFAULT_KEYWORDS_PATH,
    DEFAULT_RELEVANCE_PATH,
    DEFAULT_RELEVANCE_THRESHOLD,
    SearchOptions,
    SearchPluginOptions,
    SearchResult,
)
from docsearch.search.orchestrator import SearchOrchestrator
from docsearch.search.relevance import RelevanceScorer
from docsearch.store.document import Document
from docsearch.text.distance import DEFAULT_DISTANCE, DistanceSpec, resolve_distance
from docsearch.text.stemmers import DEFAULT_STEMMER, StemmerSpec, resolve_stemmer

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=type[Document])


class SearchPlugin:
    """Keyword search capability shared by the models it is installed on."""

    def __init__(
        self,
        options: SearchPluginOptions,
        cache_store: BaseSearchCacheStore | None = None,
    ) -> None:
        self.options = options
        self.stemmer = resolve_stemmer(options.stemmer, options.stop_words)
        self.extractor = KeywordExtractor(self.stemmer, options.fields)
        self.scorer = RelevanceScorer(
            resolve_distance(options.distance), options.relevance_threshold,
        )
        self._cache_store = cache_store

    @property
    def cache_store(self) -> BaseSearchCacheStore:
        """The injected cache, or one built from settings on first use."""
        if self._cache_store is None:
            from docsearch.cache.cache_factory import create_search_cache
            from docsearch.config.settings import load_settings

            self._cache_store = create_search_cache(load_settings())
            logger.info(
                "Search cache created from settings: %s",
                type(self._cache_store).__name__,
            )
        return self._cache_store

    def use_cache(self, cache_store: BaseSearchCacheStore) -> None:
        self._cache_store = cache_store

    def orchestrator(self, model: type[Document]) -> SearchOrchestrator:
        return SearchOrchestrator(
            model,
            self.stemmer,
            self.scorer,
            self.cache_store,
            keywords_path=self.options.keywords_path,
            relevance_path=self.options.relevance_path,
        )

    # --- Installation ---

    def install(self, model_cls: M) -> M:
        plugin = self
        keywords_path = self.options.keywords_path

        index = f"{keywords_path}[*]"
        if index not in model_cls.indexes:
            model_cls.indexes.append(index)

        async def search(
            cls: type[Document],
            query: str,
            fields: Any = None,
            options: SearchOptions | Mapping[str, Any] | None = None,
        ) -> SearchResult:
            return await plugin.orchestrator(cls).search(query, fields, options)

        async def rebuild_all_keywords(cls: type[Document]) -> int:
            return await plugin.rebuild_all_keywords(cls)

        def process_keywords(self: Document) -> list[str]:
            return plugin.extractor.compute(self)

        def update_keywords(self: Document) -> None:
            self.set(keywords_path, self.process_keywords())

        model_cls.search = classmethod(search)
        model_cls.rebuild_all_keywords = classmethod(rebuild_all_keywords)
        model_cls.process_keywords = process_keywords
        model_cls.update_keywords = update_keywords
        model_cls.search_plugin = plugin
        model_cls.pre_save(plugin.refresh_keywords)

        logger.debug(
            "Search plugin installed on %s (fields=%s)",
            model_cls.__name__, self.options.fields,
        )
        return model_cls

    # --- Hooks / bulk operations ---

    def refresh_keywords(self, document: Document) -> None:
        """Pre-save hook: recompute keywords for new or changed documents."""
        changed = document.is_new or any(
            document.is_modified(field) for field in self.options.fields
        )
        if changed:
            document.update_keywords()

    async def rebuild_all_keywords(self, model: type[Document]) -> int:
        """Recompute and save the keywords of every document.

        Saves run concurrently. A failing save is logged and does not stop
        the others; only a failure to list the documents propagates.

        Returns:
            Number of documents processed.
        """
        set_search_context(model.collection, operation="rebuild")
        try:
            documents = await model.find()
            if not documents:
                logger.info("No documents to rebuild in %s", model.collection)
                return 0

            async def _rebuild(document: Document) -> None:
                document.update_keywords()
                await document.save()

            outcomes = await asyncio.gather(
                *(_rebuild(document) for document in documents),
                return_exceptions=True,
            )
            failures = 0
            for document, outcome in zip(documents, outcomes):
                if isinstance(outcome, Exception):
                    failures += 1
                    logger.error(
                        "Keyword rebuild failed for %s: %s", document.id, outcome,
                        exc_info=outcome,
                    )
                elif isinstance(outcome, BaseException):
                    raise outcome

            logger.info(
                "Rebuilt keywords for %d documents in %s (%d failed)",
                len(documents), model.collection, failures,
            )
            return len(documents)
        finally:
            clear_context()


def searchable(
    fields: Sequence[str],
    *,
    stemmer: StemmerSpec = DEFAULT_STEMMER,
    distance: DistanceSpec = DEFAULT_DISTANCE,
    keywords_path: str = DEFAULT_KEYWORDS_PATH,
    relevance_path: str = DEFAULT_RELEVANCE_PATH,
    relevance_threshold: float = DEFAULT_RELEVANCE_THRESHOLD,
    stop_words: Iterable[str] | None = None,
    cache_store: BaseSearchCacheStore | None = None,
) -> Callable[[M], M]:
    """Class decorator installing a SearchPlugin built from keyword options."""
    options = SearchPluginOptions(
        fields=list(fields),
        stemmer=stemmer,
        distance=distance,
        keywords_path=keywords_path,
        relevance_path=relevance_path,
        relevance_threshold=relevance_threshold,
        stop_words=None if stop_words is None else list(stop_words),
    )
    plugin = SearchPlugin(options, cache_store)
    return plugin.install
