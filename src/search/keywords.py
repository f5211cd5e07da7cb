# src/search/keywords.py — v1
"""Keyword extraction: the stem set a document is found by."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Mapping, Sequence
from typing import Any, TypeVar

from docsearch.store.query import MISSING, get_path
from docsearch.text.stemmers import TokenizeAndStem

H = TypeVar("H", bound=Hashable)


def unique(items: Iterable[H]) -> list[H]:
    """Deduplicate, keeping first occurrences in order."""
    return list(dict.fromkeys(items))


def field_text(value: Any) -> str:
    """Strings verbatim, sequences space-joined (None items skipped), else empty."""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value if item is not None)
    return ""


class KeywordExtractor:
    """Compute a document's keywords from its configured source fields."""

    def __init__(self, stemmer: TokenizeAndStem, fields: Sequence[str]) -> None:
        self._stemmer = stemmer
        self.fields = list(fields)

    def source_text(self, document: Any) -> str:
        return " ".join(field_text(_read(document, f)) for f in self.fields)

    def compute(self, document: Any) -> list[str]:
        """Unique stems of all source fields. Stemmer errors propagate."""
        return unique(self._stemmer(self.source_text(document)))


def _read(document: Any, path: str) -> Any:
    if isinstance(document, Mapping):
        value = get_path(document, path)
        return None if value is MISSING else value
    return document.get(path)
