# src/text/distance.py — v1
"""String similarity functions backed by rapidfuzz.

Every function maps two stems to a similarity in [0, 1], 1 meaning equal.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Union

from rapidfuzz.distance import DamerauLevenshtein, Jaro, JaroWinkler, Levenshtein

DistanceFunction = Callable[[str, str], float]
DistanceSpec = Union[str, DistanceFunction]

DEFAULT_DISTANCE = "jaro_winkler"

_DISTANCES: dict[str, DistanceFunction] = {
    "jaro_winkler": JaroWinkler.similarity,
    "jaro": Jaro.similarity,
    "levenshtein": Levenshtein.normalized_similarity,
    "damerau_levenshtein": DamerauLevenshtein.normalized_similarity,
}


class UnknownDistanceError(ValueError):
    """Raised when a distance name is not registered."""


def available_distances() -> list[str]:
    return sorted(_DISTANCES)


def get_distance(name: str = DEFAULT_DISTANCE) -> DistanceFunction:
    """Resolve a similarity function by name."""
    try:
        return _DISTANCES[name.strip().lower()]
    except KeyError:
        raise UnknownDistanceError(
            f"Unknown distance: {name!r}. "
            f"Available: {', '.join(available_distances())}"
        ) from None


def resolve_distance(spec: DistanceSpec) -> DistanceFunction:
    """Accept either a registered name or a ready similarity callable."""
    if callable(spec):
        return spec
    return get_distance(spec)
