# src/store/arangodb_store.py — v1
"""ArangoDB document store adapter.

Uses the python-arango SDK. Filters, sort specs and pipelines are compiled to
AQL with bind variables; ``_id`` is stored as the ArangoDB ``_key``.
Projections apply to top-level attributes only. Paths carrying a ``field[*]``
array index compile membership tests to the ``@v IN doc.field[*]`` form the
index serves.
Requires: pip install python-arango.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Mapping, Sequence
from typing import Any

from docsearch.store.base_document_store import BaseDocumentStore
from docsearch.store.query import (
    UnsupportedOperatorError,
    is_inclusive,
    is_operator_expression,
    normalize_projection,
    normalize_sort,
    parse_stage,
)

logger = logging.getLogger(__name__)

# AQL needs an explicit count whenever an offset is given.
_UNBOUNDED = 2**31 - 1

_AQL_COMPARISONS = {"$gt": ">", "$gte": ">=", "$lt": "<", "$lte": "<="}


class AqlBuilder:
    """Accumulates an AQL query body and its bind variables.

    ``array_paths`` lists the ``doc`` paths backed by an array index.
    """

    def __init__(self, array_paths: Collection[str] = ()) -> None:
        self.bind_vars: dict[str, Any] = {}
        self._counter = 0
        self._array_paths = frozenset(array_paths)

    def param(self, value: Any) -> str:
        name = f"p{self._counter}"
        self._counter += 1
        self.bind_vars[name] = value
        return f"@{name}"

    def attr(self, var: str, path: str) -> str:
        """Attribute access expression; ``doc._id`` maps to ``doc._key``."""
        if var == "doc" and path == "_id":
            return "doc._key"
        return var + "".join(f"[{self.param(part)}]" for part in path.split("."))

    def condition_attrs(self, var: str, path: str) -> tuple[str, str | None]:
        """Attribute expression plus its ``[*]`` expansion on array-indexed paths.

        Both share the same bind variables, so either may go unused.
        """
        if var != "doc" or path not in self._array_paths:
            return self.attr(var, path), None
        attr = var + "".join(f".{self.param(part)}" for part in path.split("."))
        return attr, f"{attr}[*]"

    # --- Filters ---

    def filter_expr(self, var: str, query: Mapping[str, Any] | None) -> str:
        if not query:
            return "true"
        clauses = []
        for key, condition in query.items():
            if key in ("$and", "$or", "$nor"):
                subs = [self.filter_expr(var, sub) for sub in condition] or ["true"]
                joiner = " AND " if key == "$and" else " OR "
                clause = f"({joiner.join(subs)})"
                clauses.append(f"NOT {clause}" if key == "$nor" else clause)
            elif key.startswith("$"):
                raise UnsupportedOperatorError(f"Unsupported query operator: {key}")
            else:
                clauses.append(self._condition(var, key, condition))
        return " AND ".join(clauses)

    def _condition(self, var: str, path: str, condition: Any) -> str:
        attr, array = self.condition_attrs(var, path)
        if not is_operator_expression(condition):
            return self._equals(attr, condition, array)
        parts = []
        for op, arg in condition.items():
            if op == "$eq":
                parts.append(self._equals(attr, arg, array))
            elif op == "$ne":
                parts.append(f"NOT {self._equals(attr, arg, array)}")
            elif op == "$in":
                parts.append(self._in(attr, arg, array))
            elif op == "$nin":
                parts.append(f"NOT {self._in(attr, arg, array)}")
            elif op == "$exists":
                parts.append(f"{attr} {'!=' if arg else '=='} null")
            elif op in _AQL_COMPARISONS:
                parts.append(
                    f"({attr} != null AND {attr} {_AQL_COMPARISONS[op]} {self.param(arg)})"
                )
            else:
                raise UnsupportedOperatorError(f"Unsupported query operator: {op}")
        return "(" + " AND ".join(parts) + ")"

    def _equals(self, attr: str, value: Any, array: str | None = None) -> str:
        p = self.param(value)
        if array and not isinstance(value, list):
            return f"{p} IN {array}"
        if isinstance(value, list) or attr == "doc._key":
            return f"{attr} == {p}"
        return f"(IS_ARRAY({attr}) ? {p} IN {attr} : {attr} == {p})"

    def _in(self, attr: str, values: Any, array: str | None = None) -> str:
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            raise UnsupportedOperatorError("$in/$nin requires a list argument")
        if array:
            if not values:
                return "false"
            return "(" + " OR ".join(f"{self.param(v)} IN {array}" for v in values) + ")"
        p = self.param(list(values))
        if attr == "doc._key":
            return f"{attr} IN {p}"
        return f"(IS_ARRAY({attr}) ? LENGTH(INTERSECTION({attr}, {p})) > 0 : {attr} IN {p})"

    # --- Sorting / projection ---

    def sort_clause(self, var: str, sort: Any) -> str:
        spec = normalize_sort(sort)
        if not spec:
            return ""
        keys = [
            f"{self.attr(var, path)} {'DESC' if direction < 0 else 'ASC'}"
            for path, direction in spec
        ]
        return "SORT " + ", ".join(keys)

    def projection_expr(self, var: str, projection: Any) -> str:
        fields = normalize_projection(projection)
        if not fields:
            return var
        if any("." in path for path in fields):
            raise UnsupportedOperatorError(
                "Nested projection paths are not supported by the ArangoDB store"
            )
        if is_inclusive(fields):
            keep = [path for path, flag in fields.items() if flag and path != "_id"]
            if fields.get("_id", 1):
                keep.append("_id")
            return f"KEEP({var}, {self.param(keep)})"
        return f"UNSET({var}, {self.param(list(fields))})"


def _normalized(var: str) -> str:
    """Expression exposing ``_key`` as ``_id`` and hiding system attributes."""
    return f'MERGE(UNSET({var}, "_key", "_id", "_rev"), {{"_id": {var}._key}})'


def _array_index_paths(fields: Sequence[str]) -> list[str]:
    """Base paths of ``field[*]`` index entries."""
    return [field[: -len("[*]")] for field in fields if field.endswith("[*]")]


class ArangoDocumentStore(BaseDocumentStore):
    """Document store backed by ArangoDB."""

    def __init__(
        self,
        url: str = "http://localhost:8529",
        database: str = "docsearch",
        user: str = "root",
        password: str = "",
    ) -> None:
        try:
            from arango import ArangoClient
        except ImportError as e:
            raise ImportError(
                "python-arango package required: pip install python-arango"
            ) from e

        client = ArangoClient(hosts=url)
        self._db = client.db(database, username=user, password=password)
        self._known: set[str] = set()
        self._array_paths: dict[str, set[str]] = {}

    def _collection(self, name: str):
        """Return the collection, creating it on first use."""
        if name not in self._known:
            paths = self._array_paths.setdefault(name, set())
            if not self._db.has_collection(name):
                self._db.create_collection(name)
                logger.info("Created collection %s", name)
            else:
                for index in self._db.collection(name).indexes():
                    paths.update(_array_index_paths(index.get("fields", [])))
            self._known.add(name)
        return self._db.collection(name)

    def _builder(self, collection: str) -> AqlBuilder:
        return AqlBuilder(self._array_paths.get(collection, ()))

    def _execute(self, aql: str, bind_vars: dict[str, Any]) -> list[Any]:
        logger.debug("AQL: %s", aql)
        return list(self._db.aql.execute(aql, bind_vars=bind_vars))

    # --- Reads ---

    async def find(
        self,
        collection: str,
        filter: Mapping[str, Any] | None = None,
        projection: Any = None,
        *,
        sort: Any = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        self._collection(collection)
        q = self._builder(collection)
        lines = [
            f"FOR doc IN @@col FILTER {q.filter_expr('doc', filter)}",
        ]
        sort_clause = q.sort_clause("doc", sort)
        if sort_clause:
            lines.append(sort_clause)
        if skip or limit is not None:
            count = _UNBOUNDED if limit is None else limit
            lines.append(f"LIMIT {q.param(skip)}, {q.param(count)}")
        lines.append(f"LET out = {_normalized('doc')}")
        lines.append(f"RETURN {q.projection_expr('out', projection)}")
        q.bind_vars["@col"] = collection
        return self._execute("\n".join(lines), q.bind_vars)

    async def aggregate(
        self, collection: str, pipeline: Sequence[Mapping[str, Any]]
    ) -> list[dict[str, Any]]:
        """Compile the pipeline into a single FOR loop.

        AQL applies operations in order, so each stage lands after the
        previous one. A $project rebinds the current row to a new variable.
        """
        self._collection(collection)
        q = AqlBuilder()
        var = "row0"
        lines = [f"FOR doc IN @@col LET {var} = {_normalized('doc')}"]
        for index, stage in enumerate(pipeline, start=1):
            name, arg = parse_stage(stage)
            if name == "$match":
                lines.append(f"FILTER {q.filter_expr(var, arg)}")
            elif name == "$sort":
                clause = q.sort_clause(var, arg)
                if clause:
                    lines.append(clause)
            elif name == "$skip":
                lines.append(f"LIMIT {q.param(int(arg))}, {q.param(_UNBOUNDED)}")
            elif name == "$limit":
                lines.append(f"LIMIT {q.param(int(arg))}")
            else:
                new_var = f"row{index}"
                lines.append(f"LET {new_var} = {q.projection_expr(var, arg)}")
                var = new_var
        lines.append(f"RETURN {var}")
        q.bind_vars["@col"] = collection
        return self._execute("\n".join(lines), q.bind_vars)

    async def count(
        self, collection: str, filter: Mapping[str, Any] | None = None
    ) -> int:
        self._collection(collection)
        q = self._builder(collection)
        aql = (
            f"FOR doc IN @@col FILTER {q.filter_expr('doc', filter)} "
            "COLLECT WITH COUNT INTO n RETURN n"
        )
        q.bind_vars["@col"] = collection
        rows = self._execute(aql, q.bind_vars)
        return rows[0] if rows else 0

    # --- Writes ---

    async def save(self, collection: str, document: Mapping[str, Any]) -> None:
        if "_id" not in document:
            raise ValueError("Document must carry an _id to be saved")
        body = {k: v for k, v in document.items() if k != "_id"}
        body["_key"] = str(document["_id"])
        self._collection(collection).insert(body, overwrite=True)

    async def delete_many(
        self, collection: str, filter: Mapping[str, Any] | None = None
    ) -> int:
        self._collection(collection)
        q = self._builder(collection)
        aql = (
            f"FOR doc IN @@col FILTER {q.filter_expr('doc', filter)} "
            "REMOVE doc IN @@col RETURN 1"
        )
        q.bind_vars["@col"] = collection
        return len(self._execute(aql, q.bind_vars))

    # --- Schema ---

    async def ensure_index(self, collection: str, field: str) -> None:
        """Create a persistent index (idempotent on the server side)."""
        self._collection(collection).add_index(
            {"type": "persistent", "fields": [field], "sparse": False}
        )
        self._array_paths[collection].update(_array_index_paths([field]))
        logger.info("Ensured persistent index on %s.%s", collection, field)

    @property
    def provider_name(self) -> str:
        return "arangodb"
