# src/search/relevance.py — v1
"""Additive token-distance relevance.

score = sum over query stems q, over document keywords k, of distance(q, k)
whenever distance(q, k) > threshold. The sum is not normalized by keyword
count, so documents with more keywords are never penalized.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from docsearch.store.query import MISSING, get_path, set_path
from docsearch.text.distance import DistanceFunction

DEFAULT_THRESHOLD = 0.5


class RelevanceScorer:
    """Score keyword sets against query stems."""

    def __init__(
        self, distance: DistanceFunction, threshold: float = DEFAULT_THRESHOLD
    ) -> None:
        self._distance = distance
        self.threshold = threshold

    def token_relevance(self, token: str, keywords: Iterable[str]) -> float:
        total = 0.0
        for keyword in keywords:
            similarity = self._distance(token, keyword)
            if similarity > self.threshold:
                total += similarity
        return total

    def score(self, query: Sequence[str], keywords: Sequence[str]) -> float:
        return sum(self.token_relevance(token, keywords) for token in query)

    def rank(
        self,
        query: Sequence[str],
        candidates: list[dict[str, Any]],
        keywords_path: str,
        relevance_path: str,
    ) -> list[dict[str, Any]]:
        """Record each candidate's score and sort by it, highest first.

        The sort is stable: equal scores keep the candidates' input order.
        """
        for candidate in candidates:
            keywords = get_path(candidate, keywords_path)
            if keywords is MISSING or keywords is None:
                keywords = []
            set_path(candidate, relevance_path, self.score(query, keywords))
        return sorted(candidates, key=lambda c: -get_path(c, relevance_path))
