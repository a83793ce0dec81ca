"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

JSON Graph value types.

A graph leaf is either a JSON primitive or one of the wrapper types below:

- ``Ref``: points at another path in the same graph.
- ``Atom``: an explicit leaf, even when its value is ``None``. An absent path
  means "unknown"; ``Atom(None)`` means "known to be empty".
- ``ErrorValue``: resolution failed at this path (or for its whole subtree).
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from ..types import JSONObject, JSONPrimitive, JSONValue, Path, PathKey


@dataclass(frozen=True, slots=True)
class Ref:
    """Reference to another path in the graph."""

    path: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))


@dataclass(frozen=True, slots=True)
class Atom:
    """Explicit graph leaf."""

    value: JSONValue = None
    expires: float | None = None


@dataclass(frozen=True, slots=True)
class ErrorValue:
    """Error attached at the path where resolution failed."""

    message: JSONValue


@dataclass(frozen=True, slots=True)
class Range:
    """Inclusive integer range used inside pathsets and invalidations."""

    start: int
    end: int

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def __len__(self) -> int:
        return max(0, self.end - self.start + 1)


GraphValue: TypeAlias = JSONPrimitive | Ref | Atom | ErrorValue
KeySet: TypeAlias = PathKey | Range | Sequence[PathKey | Range]
PathSet: TypeAlias = tuple[KeySet, ...]


@dataclass(frozen=True, slots=True)
class PathValue:
    """One ``(path, value)`` pair emitted by a handler."""

    path: Path
    value: GraphValue = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))


@dataclass(frozen=True, slots=True)
class Invalidation:
    """Marks a path range whose previously cached values are stale."""

    path: PathSet
    reason: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))


def ref(*path: PathKey) -> Ref:
    return Ref(path=tuple(path))


def atom(value: JSONValue = None, *, expires: float | None = None) -> Atom:
    return Atom(value=value, expires=expires)


def undefined() -> Atom:
    """Known-empty leaf."""
    return Atom(value=None)


def error(message: JSONValue) -> ErrorValue:
    return ErrorValue(message=message)


def is_leaf(value: Any) -> bool:
    """Return whether ``value`` terminates a path in a graph tree."""
    return not isinstance(value, dict)


def value_to_json(value: GraphValue) -> JSONValue:
    """Encode one graph value using JSON Graph ``$type`` objects."""
    if isinstance(value, Ref):
        return {"$type": "ref", "value": list(value.path)}
    if isinstance(value, Atom):
        row: JSONObject = {"$type": "atom"}
        if value.value is not None:
            row["value"] = value.value
        if value.expires is not None:
            row["$expires"] = value.expires
        return row
    if isinstance(value, ErrorValue):
        return {"$type": "error", "value": value.message}
    return value


def value_from_json(raw: JSONValue) -> GraphValue:
    """Decode one JSON Graph leaf; atoms without ``value`` decode to ``Atom(None)``."""
    if not isinstance(raw, dict):
        if isinstance(raw, list):
            raise ValueError("Bare JSON arrays are not valid graph leaves")
        return raw
    kind = raw.get("$type")
    if kind == "ref":
        target = raw.get("value")
        if not isinstance(target, list):
            raise ValueError("Reference value must be a path list")
        return Ref(path=tuple(target))
    if kind == "atom":
        expires = raw.get("$expires")
        return Atom(
            value=raw.get("value"),
            expires=float(expires) if isinstance(expires, (int, float)) else None,
        )
    if kind == "error":
        return ErrorValue(message=raw.get("value"))
    raise ValueError(f"Unknown JSON Graph value type: {kind!r}")


def is_wrapped_leaf(raw: Any) -> bool:
    """Return whether a decoded JSON object is a ``$type`` leaf."""
    return isinstance(raw, dict) and "$type" in raw
