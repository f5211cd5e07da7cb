# tests/unit/search/test_keywords.py — v1
"""Tests for search/keywords.py — keyword extraction."""

from __future__ import annotations

import pytest

from docsearch.search.keywords import KeywordExtractor, field_text, unique
from docsearch.store.document import Document
from docsearch.text.stemmers import get_stemmer


def _split(text: str) -> list[str]:
    return text.lower().split()


class TestHelpers:
    def test_unique_keeps_first_occurrence(self):
        assert unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Hello", "Hello"),
            (["a", "b"], "a b"),
            (("a", 3, "b"), "a 3 b"),
            (["x", None, 2020], "x 2020"),
            (42, ""),
            (None, ""),
            ({"k": "v"}, ""),
        ],
    )
    def test_field_text(self, value, expected):
        assert field_text(value) == expected


class TestKeywordExtractor:
    def test_joins_all_fields(self):
        extractor = KeywordExtractor(_split, ["title", "tags"])
        doc = {"title": "Red car", "tags": ["fast", "red"]}
        assert extractor.compute(doc) == ["red", "car", "fast"]

    def test_numeric_tags_are_indexed(self):
        extractor = KeywordExtractor(_split, ["title", "tags"])
        doc = {"title": "Red car", "tags": [2020, "fast"]}
        assert extractor.compute(doc) == ["red", "car", "2020", "fast"]

    def test_missing_and_non_text_fields_ignored(self):
        extractor = KeywordExtractor(_split, ["title", "views", "body"])
        assert extractor.compute({"title": "Car", "views": 3}) == ["car"]

    def test_dotted_paths(self):
        extractor = KeywordExtractor(_split, ["meta.summary"])
        assert extractor.compute({"meta": {"summary": "Deep text"}}) == ["deep", "text"]

    def test_document_instances(self):
        extractor = KeywordExtractor(_split, ["title"])
        assert extractor.compute(Document({"title": "A b a"})) == ["a", "b"]

    def test_empty_sources(self):
        assert KeywordExtractor(_split, ["title"]).compute({}) == []

    def test_porter_stems(self):
        extractor = KeywordExtractor(get_stemmer("porter"), ["title"])
        assert extractor.compute({"title": "Searching searched objects"}) == [
            "search", "object",
        ]

    def test_stemmer_errors_propagate(self):
        def broken(text):
            raise RuntimeError("stemmer down")
        with pytest.raises(RuntimeError, match="stemmer down"):
            KeywordExtractor(broken, ["title"]).compute({"title": "x"})
