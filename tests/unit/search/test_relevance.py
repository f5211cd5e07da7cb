# tests/unit/search/test_relevance.py — v1
"""Tests for search/relevance.py — additive token-distance scoring."""

from __future__ import annotations

import pytest

from docsearch.search.relevance import DEFAULT_THRESHOLD, RelevanceScorer
from docsearch.text.distance import get_distance


def exact(a: str, b: str) -> float:
    return 1.0 if a == b else 0.0


def table(a: str, b: str) -> float:
    return {("q", "x"): 0.9, ("q", "y"): 0.5, ("q", "z"): 0.6}.get((a, b), 0.0)


class TestScore:
    def test_default_threshold(self):
        assert DEFAULT_THRESHOLD == 0.5
        assert RelevanceScorer(exact).threshold == 0.5

    def test_threshold_is_strict(self):
        scorer = RelevanceScorer(table)
        assert scorer.token_relevance("q", ["x", "y", "z"]) == pytest.approx(1.5)

    def test_sums_over_query_tokens(self):
        scorer = RelevanceScorer(exact)
        assert scorer.score(["a", "b", "c"], ["a", "b"]) == 2.0

    def test_not_normalized_by_keyword_count(self):
        scorer = RelevanceScorer(exact)
        assert scorer.score(["a"], ["a"]) == scorer.score(["a"], ["a", *"bcdefgh"])

    def test_empty(self):
        scorer = RelevanceScorer(exact)
        assert scorer.score([], ["a"]) == 0.0
        assert scorer.score(["a"], []) == 0.0

    def test_similar_stems_add_up(self):
        scorer = RelevanceScorer(get_distance("jaro_winkler"))
        rich = scorer.score(["object"], ["object", "objects"])
        plain = scorer.score(["object"], ["object", "car"])
        assert rich > plain == pytest.approx(1.0)


class TestRank:
    def test_records_score_and_sorts_descending(self):
        scorer = RelevanceScorer(exact)
        candidates = [
            {"_id": "a", "_keywords": ["x"]},
            {"_id": "b", "_keywords": ["x", "y"]},
        ]
        ranked = scorer.rank(["x", "y"], candidates, "_keywords", "_relevance")
        assert [c["_id"] for c in ranked] == ["b", "a"]
        assert ranked[0]["_relevance"] == 2.0
        assert ranked[1]["_relevance"] == 1.0

    def test_ties_keep_input_order(self):
        scorer = RelevanceScorer(exact)
        candidates = [{"_id": i, "kw": ["x"]} for i in ("a", "b", "c")]
        ranked = scorer.rank(["x"], candidates, "kw", "score")
        assert [c["_id"] for c in ranked] == ["a", "b", "c"]

    def test_missing_keywords_score_zero(self):
        scorer = RelevanceScorer(exact)
        ranked = scorer.rank(["x"], [{"_id": "a"}, {"_id": "b", "kw": ["x"]}], "kw", "s")
        assert [c["_id"] for c in ranked] == ["b", "a"]
        assert ranked[1]["s"] == 0.0

    def test_nested_paths(self):
        scorer = RelevanceScorer(exact)
        [ranked] = scorer.rank(
            ["x"], [{"_id": "a", "search": {"kw": ["x"]}}], "search.kw", "search.score",
        )
        assert ranked["search"]["score"] == 1.0
