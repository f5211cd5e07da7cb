# tests/conftest.py — v1
"""Shared test fixtures for all unit and integration tests.

Provides in-memory document stores and search caches, a controllable clock,
deterministic text functions and a factory for fresh searchable models.
No external dependencies — everything runs in process.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from docsearch.cache.memory_store import MemorySearchCacheStore
from docsearch.search.plugin import searchable
from docsearch.store.document import Document
from docsearch.store.memory_store import MemoryDocumentStore


# === Deterministic text functions ===


def word_stemmer(text: str) -> list[str]:
    """Lowercased word tokens, no stemming."""
    return re.findall(r"\w+", text.lower())


def exact_distance(a: str, b: str) -> float:
    """1.0 for identical stems, 0.0 otherwise."""
    return 1.0 if a == b else 0.0


class FakeClock:
    """Manually advanced UTC clock for TTL tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# === FIXTURES: Stores ===


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def document_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def search_cache(clock: FakeClock) -> MemorySearchCacheStore:
    return MemorySearchCacheStore(ttl_seconds=3600, clock=clock)


# === FIXTURES: Models ===


@pytest.fixture
def make_model(document_store: MemoryDocumentStore, search_cache: MemorySearchCacheStore):
    """Factory building a fresh searchable Document subclass per call.

    Each model gets its own collection name so tests never share data.
    """

    def _make(
        fields: list[str] | None = None,
        references: dict[str, str] | None = None,
        **plugin_options: Any,
    ) -> type[Document]:
        plugin_options.setdefault("stemmer", word_stemmer)
        plugin_options.setdefault("cache_store", search_cache)
        attrs = {
            "collection": f"articles_{uuid.uuid4().hex[:8]}",
            "references": dict(references or {}),
        }
        model = type("Article", (Document,), attrs)
        searchable(fields or ["title", "description", "tags"], **plugin_options)(model)
        model.bind(document_store)
        return model

    return _make


@pytest.fixture
def article_model(make_model) -> type[Document]:
    return make_model()
