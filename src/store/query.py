# src/store/query.py — v1
"""MongoDB-style query language shared by every document store adapter.

Filters support equality (array fields match on membership), the operators
$eq $ne $in $nin $gt $gte $lt $lte $exists and the logical $and $or $nor.
Aggregation pipelines support the $match $sort $skip $limit $project stages.
Paths are dotted (``author.name``).

The in-memory store evaluates these directly; the ArangoDB store translates
the normalized forms into AQL.
"""

from __future__ import annotations

import copy
import operator
from collections.abc import Mapping, Sequence
from typing import Any, Callable

Filter = Mapping[str, Any]
Projection = dict[str, int]
SortSpec = list[tuple[str, int]]

MISSING: Any = object()

COMPARISON_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}
FIELD_OPERATORS = frozenset(
    {"$eq", "$ne", "$in", "$nin", "$exists", *COMPARISON_OPERATORS}
)
LOGICAL_OPERATORS = frozenset({"$and", "$or", "$nor"})
PIPELINE_STAGES = frozenset({"$match", "$sort", "$skip", "$limit", "$project"})


class UnsupportedOperatorError(ValueError):
    """Raised for query operators or pipeline stages outside the subset."""


# --- Paths ---


def get_path(document: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted path, returning MISSING when any segment is absent."""
    current: Any = document
    for part in path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return MISSING
        current = current[part]
    return current


def set_path(document: dict[str, Any], path: str, value: Any) -> None:
    """Set a dotted path, creating intermediate mappings."""
    parts = path.split(".")
    current = document
    for part in parts[:-1]:
        nested = current.get(part)
        if not isinstance(nested, dict):
            nested = {}
            current[part] = nested
        current = nested
    current[parts[-1]] = value


def delete_path(document: dict[str, Any], path: str) -> None:
    parts = path.split(".")
    current: Any = document
    for part in parts[:-1]:
        current = current.get(part) if isinstance(current, dict) else None
        if current is None:
            return
    if isinstance(current, dict):
        current.pop(parts[-1], None)


# --- Filters ---


def is_operator_expression(condition: Any) -> bool:
    """True for ``{"$op": arg, ...}`` conditions."""
    return (
        isinstance(condition, Mapping)
        and bool(condition)
        and all(str(k).startswith("$") for k in condition)
    )


def merge_filters(*filters: Filter | None) -> dict[str, Any]:
    """Combine filters with AND semantics.

    Disjoint filters are merged into one mapping; overlapping keys are
    wrapped in ``$and`` so that no constraint is lost.
    """
    parts = [dict(f) for f in filters if f]
    if not parts:
        return {}
    merged: dict[str, Any] = {}
    for part in parts:
        if merged.keys() & part.keys():
            return {"$and": parts}
        merged.update(part)
    return merged


def matches(document: Mapping[str, Any], query: Filter | None) -> bool:
    """Evaluate a filter against one document."""
    if not query:
        return True
    for key, condition in query.items():
        if key == "$and":
            if not all(matches(document, sub) for sub in condition):
                return False
        elif key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif key == "$nor":
            if any(matches(document, sub) for sub in condition):
                return False
        elif key.startswith("$"):
            raise UnsupportedOperatorError(f"Unsupported query operator: {key}")
        elif not _match_condition(get_path(document, key), condition):
            return False
    return True


def _match_condition(value: Any, condition: Any) -> bool:
    if is_operator_expression(condition):
        return all(
            _apply_operator(value, op, arg) for op, arg in condition.items()
        )
    return _equals(value, condition)


def _equals(value: Any, expected: Any) -> bool:
    if value is MISSING:
        return expected is None
    if isinstance(value, list) and not isinstance(expected, list):
        return expected in value
    return value == expected


def _apply_operator(value: Any, op: str, arg: Any) -> bool:
    if op == "$eq":
        return _equals(value, arg)
    if op == "$ne":
        return not _equals(value, arg)
    if op == "$in":
        return any(_equals(value, candidate) for candidate in _as_list(op, arg))
    if op == "$nin":
        return not any(_equals(value, candidate) for candidate in _as_list(op, arg))
    if op == "$exists":
        return (value is not MISSING) == bool(arg)
    if op in COMPARISON_OPERATORS:
        return _compare(value, arg, COMPARISON_OPERATORS[op])
    raise UnsupportedOperatorError(f"Unsupported query operator: {op}")


def _as_list(op: str, arg: Any) -> list[Any]:
    if isinstance(arg, (str, bytes)) or not isinstance(arg, Sequence):
        raise UnsupportedOperatorError(f"{op} requires a list argument")
    return list(arg)


def _compare(value: Any, arg: Any, fn: Callable[[Any, Any], bool]) -> bool:
    if value is MISSING or value is None:
        return False
    candidates = value if isinstance(value, list) else [value]
    for candidate in candidates:
        try:
            if fn(candidate, arg):
                return True
        except TypeError:
            continue
    return False


# --- Projection ---


def normalize_projection(spec: Any) -> Projection | None:
    """Normalize a projection to ``{path: 0 | 1}``.

    Accepts a mapping, a sequence of paths, or a whitespace separated string
    where a ``-`` prefix excludes the path (``"title -body"``).
    """
    if not spec:
        return None
    if isinstance(spec, str):
        spec = spec.split()
    if isinstance(spec, Mapping):
        projection = {str(k): 1 if v else 0 for k, v in spec.items()}
    else:
        projection = {}
        for name in spec:
            name = str(name)
            if name.startswith("-"):
                projection[name[1:]] = 0
            else:
                projection[name] = 1
    modes = {v for k, v in projection.items() if k != "_id"}
    if len(modes) > 1:
        raise UnsupportedOperatorError(
            "Projection cannot mix inclusion and exclusion"
        )
    return projection


def is_inclusive(projection: Projection) -> bool:
    """True when the projection lists the paths to keep."""
    return any(v for k, v in projection.items() if k != "_id")


def apply_projection(
    document: Mapping[str, Any], projection: Projection | None
) -> dict[str, Any]:
    """Return a projected deep copy of ``document``."""
    if not projection:
        return copy.deepcopy(dict(document))
    if is_inclusive(projection):
        result: dict[str, Any] = {}
        if projection.get("_id", 1) and "_id" in document:
            result["_id"] = copy.deepcopy(document["_id"])
        for path, keep in projection.items():
            if not keep or path == "_id":
                continue
            value = get_path(document, path)
            if value is not MISSING:
                set_path(result, path, copy.deepcopy(value))
        return result
    result = copy.deepcopy(dict(document))
    for path in projection:
        delete_path(result, path)
    return result


# --- Sorting ---


def normalize_sort(spec: Any) -> SortSpec:
    """Normalize a sort spec to ``[(path, 1 | -1), ...]``.

    Accepts a mapping, a sequence of pairs, or a string such as
    ``"-created title"``.
    """
    if not spec:
        return []
    if isinstance(spec, str):
        return [
            (name[1:], -1) if name.startswith("-") else (name, 1)
            for name in spec.split()
        ]
    items = spec.items() if isinstance(spec, Mapping) else spec
    result: SortSpec = []
    for path, direction in items:
        if isinstance(direction, str):
            direction = -1 if direction.lower() in ("desc", "descending", "-1") else 1
        result.append((str(path), -1 if int(direction) < 0 else 1))
    return result


def _sort_key(value: Any) -> tuple[int, Any]:
    # Missing and null sort first, then numbers, then strings, then the rest.
    if value is MISSING or value is None:
        return (0, 0)
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, repr(value))


def sort_documents(
    documents: list[dict[str, Any]], sort: SortSpec
) -> list[dict[str, Any]]:
    """Stable multi-key sort."""
    result = list(documents)
    for path, direction in reversed(sort):
        result.sort(
            key=lambda doc, p=path: _sort_key(get_path(doc, p)),
            reverse=direction < 0,
        )
    return result


# --- Aggregation ---


def run_pipeline(
    documents: list[dict[str, Any]], pipeline: Sequence[Mapping[str, Any]]
) -> list[dict[str, Any]]:
    """Run an aggregation pipeline over in-memory documents."""
    result = list(documents)
    for stage in pipeline:
        name, arg = parse_stage(stage)
        if name == "$match":
            result = [doc for doc in result if matches(doc, arg)]
        elif name == "$sort":
            result = sort_documents(result, normalize_sort(arg))
        elif name == "$skip":
            result = result[int(arg):]
        elif name == "$limit":
            result = result[: int(arg)]
        else:
            projection = normalize_projection(arg)
            result = [apply_projection(doc, projection) for doc in result]
    return result


def parse_stage(stage: Mapping[str, Any]) -> tuple[str, Any]:
    """Split a single-key stage mapping into ``(name, argument)``."""
    if len(stage) != 1:
        raise UnsupportedOperatorError(
            f"Pipeline stage must have exactly one key: {dict(stage)!r}"
        )
    name, arg = next(iter(stage.items()))
    if name not in PIPELINE_STAGES:
        raise UnsupportedOperatorError(f"Unsupported pipeline stage: {name}")
    return name, arg
