# src/search/models.py — v1
"""Search domain models: plugin options, per-call options and results."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docsearch.text.distance import DEFAULT_DISTANCE
from docsearch.text.stemmers import DEFAULT_STEMMER

DEFAULT_KEYWORDS_PATH = "_keywords"
DEFAULT_RELEVANCE_PATH = "_relevance"
DEFAULT_RELEVANCE_THRESHOLD = 0.5


class SearchPluginOptions(BaseModel):
    """Configuration supplied when the plugin is installed on a model."""

    fields: list[str] = Field(min_length=1)
    stemmer: str | Callable[[str], list[str]] = DEFAULT_STEMMER
    distance: str | Callable[[str, str], float] = DEFAULT_DISTANCE
    keywords_path: str = DEFAULT_KEYWORDS_PATH
    relevance_path: str = DEFAULT_RELEVANCE_PATH
    relevance_threshold: float = Field(DEFAULT_RELEVANCE_THRESHOLD, ge=0.0, le=1.0)
    stop_words: list[str] | None = None


class PopulateSpec(BaseModel):
    """Resolve the reference at ``path``, optionally projecting ``fields``."""

    path: str
    fields: Any = None


class SearchOptions(BaseModel):
    """Per-call search options."""

    model_config = ConfigDict(extra="forbid")

    sort: Any = None
    limit: int | None = Field(default=None, ge=0)
    skip: int | None = Field(default=None, ge=0)
    conditions: dict[str, Any] | None = None
    aggregate: list[dict[str, Any]] | None = None
    populate: list[PopulateSpec] = Field(default_factory=list)

    @field_validator("populate", mode="before")
    @classmethod
    def coerce_populate(cls, v: Any) -> Any:  # noqa: N805
        """Accept bare paths and ``(path, fields)`` pairs."""
        if v is None:
            return []
        coerced = []
        for item in v:
            if isinstance(item, str):
                coerced.append({"path": item})
            elif isinstance(item, (tuple, list)):
                coerced.append({"path": item[0], "fields": item[1] if len(item) > 1 else None})
            else:
                coerced.append(item)
        return coerced


class SearchResult(BaseModel):
    """One page of search results and the size of the full result list."""

    total_count: int
    results: list[Any] = Field(default_factory=list)
