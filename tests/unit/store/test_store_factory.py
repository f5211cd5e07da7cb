# tests/unit/store/test_store_factory.py — v1
"""Tests for store/store_factory.py."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from docsearch.config.settings import Settings
from docsearch.store.memory_store import MemoryDocumentStore
from docsearch.store.store_factory import (
    UnsupportedDocumentStoreError,
    create_document_store,
)


class TestCreateDocumentStore:
    def test_default_memory(self):
        assert isinstance(create_document_store(), MemoryDocumentStore)

    def test_memory_from_settings(self):
        store = create_document_store(Settings(_env_file=None))
        assert store.provider_name == "memory"

    def test_arangodb(self):
        settings = Settings(
            _env_file=None,
            document_store_backend="arangodb",
            arangodb_url="http://arango:8529",
            arangodb_database="search",
            arangodb_password="secret",
        )
        with patch("arango.ArangoClient") as client_cls:
            store = create_document_store(settings)
        client_cls.assert_called_once_with(hosts="http://arango:8529")
        client_cls.return_value.db.assert_called_once_with(
            "search", username="root", password="secret",
        )
        assert store.provider_name == "arangodb"

    def test_unsupported_backend(self):
        settings = Settings.model_construct(document_store_backend="mongodb")
        with pytest.raises(UnsupportedDocumentStoreError, match="mongodb"):
            create_document_store(settings)
