# src/cache/models.py — v1
"""Search cache domain model: one previously computed, ranked result list."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchCacheEntry(BaseModel):
    """Ranked document ids for a (collection, stems, conditions, order) key."""

    collection_name: str
    query: list[str]
    conditions: str | None = None
    order: str | None = None
    results: list[Any] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    def expires_at(self, ttl_seconds: int) -> datetime:
        return self.created_at + timedelta(seconds=ttl_seconds)

    def is_expired(self, ttl_seconds: int, now: datetime | None = None) -> bool:
        """True once ``ttl_seconds`` have elapsed since creation."""
        return (now or utcnow()) >= self.expires_at(ttl_seconds)
