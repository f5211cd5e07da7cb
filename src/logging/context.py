# src/logging/context.py — v1
"""Contextual logging support — attach collection and query to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Context variables for structured logging: set per search call.
_collection: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "collection", default=None
)
_query: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "query", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Immutable snapshot of current logging context."""

    collection: str | None = None
    query: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        collection=_collection.get(),
        query=_query.get(),
        operation=_operation.get(),
    )


def set_search_context(
    collection: str, query: str | None = None, operation: str = "search"
) -> None:
    """Set context for one search or rebuild call."""
    _collection.set(collection)
    _query.set(query)
    _operation.set(operation)


def clear_context() -> None:
    """Reset all context variables."""
    _collection.set(None)
    _query.set(None)
    _operation.set(None)
