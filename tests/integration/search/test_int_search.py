# tests/integration/search/test_int_search.py — v1
"""End-to-end search over ArangoDB documents with a Redis result cache.

Requires Docker; skipped otherwise.
"""

from __future__ import annotations

import uuid

import pytest

from docsearch.search.plugin import searchable
from docsearch.store.document import Document
from docsearch.text.stemmers import get_stemmer

pytestmark = [pytest.mark.arangodb, pytest.mark.redis]


@pytest.fixture
def article_model(arangodb_document_store, redis_search_cache):
    suffix = uuid.uuid4().hex[:8]

    @searchable(
        ["title", "description", "tags"],
        stemmer=get_stemmer("porter"),
        cache_store=redis_search_cache,
    )
    class Article(Document):
        collection = f"articles_{suffix}"
        references = {"author": f"authors_{suffix}"}

    Article.bind(arangodb_document_store)
    return Article


async def _seed(model):
    docs = [
        {"_id": "d1", "title": "Objects everywhere", "description": "Counting objects",
         "n": 1, "status": "published", "author": "u1"},
        {"_id": "d2", "title": "An object", "tags": ["searching", "cats"],
         "n": 2, "status": "draft", "author": "u1"},
        {"_id": "d3", "title": "Cars", "description": "Fast cars", "n": 3,
         "status": "published"},
    ]
    for doc in docs:
        await model(doc).save()


class TestArangoSearch:
    @pytest.mark.asyncio
    async def test_keyword_search(self, article_model):
        await article_model.ensure_indexes()
        await _seed(article_model)
        result = await article_model.search("object")
        assert result.total_count == 2
        assert sorted(d.id for d in result.results) == ["d1", "d2"]

        repeat = await article_model.search("objects")
        assert [d.id for d in repeat.results] == [d.id for d in result.results]

    @pytest.mark.asyncio
    async def test_no_match(self, article_model):
        await _seed(article_model)
        result = await article_model.search("xylophone")
        assert result.total_count == 0
        assert result.results == []

    @pytest.mark.asyncio
    async def test_conditions_sort_paging(self, article_model):
        await _seed(article_model)
        result = await article_model.search(
            "object car",
            options={"conditions": {"status": "published"}, "sort": {"n": -1}, "limit": 1},
        )
        assert result.total_count == 2
        assert [d.id for d in result.results] == ["d3"]

    @pytest.mark.asyncio
    async def test_populate(self, article_model, arangodb_document_store):
        await arangodb_document_store.save(
            article_model.references["author"],
            {"_id": "u1", "name": "Ana", "email": "a@x"},
        )
        await _seed(article_model)
        result = await article_model.search(
            "searching", options={"populate": [("author", "-email")]},
        )
        [doc] = result.results
        assert doc["author"] == {"_id": "u1", "name": "Ana"}

    @pytest.mark.asyncio
    async def test_rebuild(self, article_model, arangodb_document_store):
        await arangodb_document_store.save(
            article_model.collection, {"_id": "raw", "title": "Raw objects"},
        )
        assert await article_model.rebuild_all_keywords() == 1
        [row] = await arangodb_document_store.find(article_model.collection)
        assert row["_keywords"] == ["raw", "object"]
