# tests/unit/text/test_distance.py — v1
"""Tests for text/distance.py — rapidfuzz similarity registry."""

from __future__ import annotations

import pytest

from docsearch.text.distance import (
    DEFAULT_DISTANCE,
    UnknownDistanceError,
    available_distances,
    get_distance,
    resolve_distance,
)


class TestRegistry:
    def test_available(self):
        assert available_distances() == [
            "damerau_levenshtein", "jaro", "jaro_winkler", "levenshtein",
        ]

    def test_default(self):
        assert DEFAULT_DISTANCE == "jaro_winkler"

    @pytest.mark.parametrize("name", ["jaro_winkler", "jaro", "levenshtein", "damerau_levenshtein"])
    def test_identical_is_one(self, name):
        assert get_distance(name)("object", "object") == pytest.approx(1.0)

    @pytest.mark.parametrize("name", ["jaro_winkler", "jaro", "levenshtein", "damerau_levenshtein"])
    def test_disjoint_is_zero(self, name):
        assert get_distance(name)("abc", "xyz") == pytest.approx(0.0)

    def test_similar_words_above_default_threshold(self):
        assert get_distance()("object", "objects") > 0.9

    def test_winkler_prefers_common_prefix(self):
        jw = get_distance("jaro_winkler")
        jaro = get_distance("jaro")
        assert jw("search", "searcher") > jaro("search", "searcher")

    def test_levenshtein_normalized(self):
        assert get_distance("levenshtein")("abcd", "abce") == pytest.approx(0.75)

    def test_unknown(self):
        with pytest.raises(UnknownDistanceError, match="cosine"):
            get_distance("cosine")


class TestResolveDistance:
    def test_callable_passthrough(self):
        def fn(a, b):
            return 0.0
        assert resolve_distance(fn) is fn

    def test_name(self):
        assert resolve_distance("jaro")("a", "a") == pytest.approx(1.0)
