# src/store/store_factory.py — v1
"""Factory: instantiate the document store from configuration."""

from __future__ import annotations

import logging

from docsearch.config.settings import Settings
from docsearch.store.base_document_store import BaseDocumentStore

logger = logging.getLogger(__name__)


class UnsupportedDocumentStoreError(ValueError):
    """Raised when a document store backend is not supported."""


def create_document_store(settings: Settings | None = None) -> BaseDocumentStore:
    """Instantiate the configured document store.

    Args:
        settings: Application settings (DOCUMENT_STORE_BACKEND).
            Defaults to the in-memory store.

    Returns:
        Configured BaseDocumentStore instance.

    Raises:
        UnsupportedDocumentStoreError: If the backend is not supported.
    """
    backend = "memory" if settings is None else settings.document_store_backend
    logger.debug("Creating document store: %s", backend)

    if backend == "memory":
        from docsearch.store.memory_store import MemoryDocumentStore
        return MemoryDocumentStore()

    if backend == "arangodb":
        from docsearch.store.arangodb_store import ArangoDocumentStore
        return ArangoDocumentStore(
            url=settings.arangodb_url,
            database=settings.arangodb_database,
            user=settings.arangodb_user,
            password=settings.arangodb_password,
        )

    raise UnsupportedDocumentStoreError(
        f"Unsupported document store backend: {backend!r}. "
        f"Available: memory, arangodb"
    )
