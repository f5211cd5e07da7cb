# src/store/document.py — v1
"""Dict-backed document model bound to a store collection.

Subclasses declare their collection, the collections their reference paths
point to, and the fields to index. Plugins hook in through pre-save hooks
and extra index declarations; see ``docsearch.search.plugin``.

Usage:
    class Article(Document):
        collection = "articles"
        references = {"author": "authors"}

    Article.bind(store)
    await Article({"title": "Hello"}).save()
"""

from __future__ import annotations

import copy
import logging
import uuid
from collections.abc import Callable, Mapping, Sequence
from typing import Any, ClassVar, TypeVar

from docsearch.store.base_document_store import BaseDocumentStore
from docsearch.store.query import MISSING, get_path, normalize_projection, set_path

logger = logging.getLogger(__name__)

D = TypeVar("D", bound="Document")
PreSaveHook = Callable[["Document"], None]
PopulateInstruction = tuple[str, Any]


class UnboundModelError(RuntimeError):
    """Raised when a model is used before bind() attached a store."""


class MissingIdError(RuntimeError):
    """Raised when a stored document was loaded without its _id."""


class Document:
    """A single stored document with change tracking."""

    collection: ClassVar[str] = ""
    references: ClassVar[dict[str, str]] = {}
    indexes: ClassVar[list[str]] = []

    _store: ClassVar[BaseDocumentStore | None] = None
    _pre_save_hooks: ClassVar[list[PreSaveHook]] = []

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if not cls.__dict__.get("collection"):
            cls.collection = cls.__name__.lower()
        # Copies, so hooks and indexes added to one model never leak to siblings.
        cls.references = dict(cls.references)
        cls.indexes = list(cls.indexes)
        cls._pre_save_hooks = list(cls._pre_save_hooks)

    def __init__(self, data: Mapping[str, Any] | None = None, **fields: Any) -> None:
        self._data: dict[str, Any] = dict(data or {})
        self._data.update(fields)
        self._data.setdefault("_id", uuid.uuid4().hex)
        self._is_new = True
        self._partial = False
        self._snapshot: dict[str, Any] = {}

    @classmethod
    def from_store(
        cls: type[D], data: Mapping[str, Any], *, partial: bool = False
    ) -> D:
        """Wrap a stored record; it starts unmodified.

        No id is generated: a row projected without ``_id`` keeps none.
        ``partial`` marks rows read through a projection; saving one merges
        its fields into the stored record instead of replacing it.
        """
        doc = cls.__new__(cls)
        doc._data = dict(data)
        doc._partial = partial
        doc._mark_persisted()
        return doc

    def _mark_persisted(self) -> None:
        self._is_new = False
        self._snapshot = copy.deepcopy(self._data)

    # --- Field access ---

    @property
    def id(self) -> Any:
        """The document id, or None for a row projected without ``_id``."""
        return self._data.get("_id")

    @property
    def is_partial(self) -> bool:
        return self._partial

    @property
    def is_new(self) -> bool:
        return self._is_new

    def get(self, path: str, default: Any = None) -> Any:
        value = get_path(self._data, path)
        return default if value is MISSING else value

    def set(self, path: str, value: Any) -> None:
        set_path(self._data, path, value)

    def __getitem__(self, path: str) -> Any:
        value = get_path(self._data, path)
        if value is MISSING:
            raise KeyError(path)
        return value

    def __setitem__(self, path: str, value: Any) -> None:
        self.set(path, value)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and get_path(self._data, path) is not MISSING

    def is_modified(self, path: str | None = None) -> bool:
        """True when ``path`` (or anything, if None) differs from the stored state."""
        if self._is_new:
            return True
        if path is None:
            return self._data != self._snapshot
        return get_path(self._data, path) != get_path(self._snapshot, path)

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(_id={self.id!r})"

    # --- Binding / hooks ---

    @classmethod
    def bind(cls, store: BaseDocumentStore) -> None:
        """Attach the store this model reads from and writes to."""
        cls._store = store

    @classmethod
    def get_store(cls) -> BaseDocumentStore:
        if cls._store is None:
            raise UnboundModelError(
                f"{cls.__name__} is not bound to a document store; call bind() first"
            )
        return cls._store

    @classmethod
    def pre_save(cls, hook: PreSaveHook) -> PreSaveHook:
        """Register a hook run just before every save (usable as decorator)."""
        cls._pre_save_hooks.append(hook)
        return hook

    @classmethod
    async def ensure_indexes(cls) -> None:
        store = cls.get_store()
        for field in cls.indexes:
            await store.ensure_index(cls.collection, field)

    # --- Persistence ---

    async def save(self) -> None:
        """Run pre-save hooks, then upsert the document.

        A partial document is first merged into its stored record, so the
        hooks and the write see every field.

        Raises:
            MissingIdError: If the document was loaded without its _id.
        """
        store = type(self).get_store()
        if self.id is None:
            raise MissingIdError(
                f"Cannot save {type(self).__name__} loaded without _id"
            )
        if self._partial and not self._is_new:
            await self._load_full_record(store)
        for hook in type(self)._pre_save_hooks:
            hook(self)
        await store.save(self.collection, self._data)
        self._mark_persisted()

    async def _load_full_record(self, store: BaseDocumentStore) -> None:
        found = await store.find(self.collection, {"_id": self.id}, limit=1)
        self._partial = False
        if not found:
            return
        stored = found[0]
        self._snapshot = _merge(copy.deepcopy(stored), self._snapshot)
        self._data = _merge(stored, self._data)

    async def delete(self) -> None:
        if self.id is None:
            raise MissingIdError(
                f"Cannot delete {type(self).__name__} loaded without _id"
            )
        await type(self).get_store().delete_many(self.collection, {"_id": self.id})
        self._is_new = True

    # --- Queries ---

    @classmethod
    async def find(
        cls: type[D],
        filter: Mapping[str, Any] | None = None,
        projection: Any = None,
        *,
        sort: Any = None,
        skip: int = 0,
        limit: int | None = None,
        populate: Sequence[PopulateInstruction] = (),
    ) -> list[D]:
        """Query the collection; ``populate`` holds ``(path, projection)`` pairs."""
        store = cls.get_store()
        rows = await store.find(
            cls.collection, filter, projection, sort=sort, skip=skip, limit=limit,
        )
        await cls.populate_rows(rows, populate)
        partial = normalize_projection(projection) is not None
        return [cls.from_store(row, partial=partial) for row in rows]

    @classmethod
    async def populate_rows(
        cls, rows: list[dict[str, Any]], populate: Sequence[PopulateInstruction]
    ) -> list[dict[str, Any]]:
        """Resolve declared references inside raw rows."""
        store = cls.get_store()
        for path, fields in populate:
            if path not in cls.references:
                raise ValueError(
                    f"{cls.__name__} declares no reference for path {path!r}"
                )
            await store.populate(rows, path, cls.references[path], fields)
        return rows

    @classmethod
    async def find_by_id(cls: type[D], document_id: Any) -> D | None:
        found = await cls.find({"_id": document_id}, limit=1)
        return found[0] if found else None

    @classmethod
    async def delete_many(cls, filter: Mapping[str, Any] | None = None) -> int:
        return await cls.get_store().delete_many(cls.collection, filter)


def _merge(base: dict[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay ``overlay`` onto ``base`` in place, recursing into sub-documents."""
    for key, value in overlay.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge(current, value)
        else:
            base[key] = copy.deepcopy(value)
    return base
