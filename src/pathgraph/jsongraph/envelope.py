"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Nested-object form of a path value set.

``GraphEnvelope.from_path_values`` inserts each path into an empty tree and
``GraphEnvelope.flatten`` walks the tree back into path values, so both forms
carry the same information. Branches are plain dicts; anything else is a leaf.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..errors import InvalidArgumentError
from ..types import JSONObject, JSONValue, Path, PathKey
from .values import (
    GraphValue,
    Invalidation,
    PathSet,
    PathValue,
    Range,
    is_leaf,
    is_wrapped_leaf,
    value_from_json,
    value_to_json,
)

_CANONICAL_INT = re.compile(r"-?(0|[1-9]\d*)")

_MISSING = object()


@dataclass(slots=True)
class GraphEnvelope:
    """
    JSON Graph envelope.

    Attributes:
        json_graph: Nested branches keyed by path keys, holding graph leaves.
        paths: Pathsets this envelope answers.
        invalidated: Pathsets whose previously cached values must be dropped.
    """

    json_graph: dict[PathKey, Any] = field(default_factory=dict)
    paths: list[PathSet] = field(default_factory=list)
    invalidated: list[PathSet] = field(default_factory=list)

    def set(self, path: Sequence[PathKey], value: GraphValue) -> None:
        """Insert one leaf; later writes replace overlapping earlier ones."""
        if not path:
            raise InvalidArgumentError("Cannot set a value at the empty path")
        node = self.json_graph
        for key in path[:-1]:
            child = node.get(key, _MISSING)
            if child is _MISSING or is_leaf(child):
                child = {}
                node[key] = child
            node = child
        node[path[-1]] = value

    def get(self, path: Sequence[PathKey], default: Any = None) -> Any:
        """Return the leaf or branch at ``path``, or ``default`` when absent."""
        node: Any = self.json_graph
        for key in path:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    def add(self, item: PathValue | Invalidation) -> None:
        if isinstance(item, Invalidation):
            self.invalidated.append(item.path)
            return
        self.set(item.path, item.value)
        self.paths.append(item.path)

    def flatten(self) -> list[PathValue]:
        """Return the tree as path values, in insertion order."""
        return list(_walk(self.json_graph, ()))

    def items(self) -> list[PathValue | Invalidation]:
        """Path values followed by invalidation markers."""
        out: list[PathValue | Invalidation] = list(self.flatten())
        out.extend(Invalidation(path=path) for path in self.invalidated)
        return out

    def merge(self, other: GraphEnvelope) -> GraphEnvelope:
        """Mix ``other`` into this envelope and return ``self``."""
        for item in other.flatten():
            self.set(item.path, item.value)
        self.paths.extend(other.paths)
        self.invalidated.extend(other.invalidated)
        return self

    @classmethod
    def from_path_values(
        cls,
        items: Iterable[PathValue | Invalidation],
    ) -> GraphEnvelope:
        envelope = cls()
        for item in items:
            envelope.add(item)
        return envelope

    def to_json(self) -> JSONObject:
        payload: JSONObject = {"jsonGraph": _tree_to_json(self.json_graph)}
        if self.paths:
            payload["paths"] = [_pathset_to_json(p) for p in self.paths]
        if self.invalidated:
            payload["invalidated"] = [_pathset_to_json(p) for p in self.invalidated]
        return payload

    @classmethod
    def from_json(cls, payload: Mapping[str, JSONValue]) -> GraphEnvelope:
        """Decode a ``{"jsonGraph": ..., "paths": ..., "invalidated": ...}`` payload."""
        raw_graph = payload.get("jsonGraph", {})
        if not isinstance(raw_graph, dict):
            raise InvalidArgumentError("jsonGraph must be an object")
        try:
            tree = _tree_from_json(raw_graph)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc
        return cls(
            json_graph=tree,
            paths=[_pathset_from_json(p) for p in _as_list(payload.get("paths"))],
            invalidated=[
                _pathset_from_json(p) for p in _as_list(payload.get("invalidated"))
            ],
        )


def assemble(
    results: Iterable[GraphEnvelope | PathValue | Invalidation | Iterable[Any]],
) -> GraphEnvelope:
    """Mix handler outputs (envelopes or path value sequences) into one envelope."""
    out = GraphEnvelope()
    for result in results:
        if isinstance(result, GraphEnvelope):
            out.merge(result)
        elif isinstance(result, (PathValue, Invalidation)):
            out.add(result)
        else:
            for item in result:
                out.add(item)
    return out


def _walk(node: Mapping[PathKey, Any], prefix: Path) -> Iterator[PathValue]:
    for key, child in node.items():
        path = prefix + (key,)
        if is_leaf(child):
            yield PathValue(path=path, value=child)
        else:
            yield from _walk(child, path)


def _tree_to_json(node: Mapping[PathKey, Any]) -> JSONObject:
    out: JSONObject = {}
    for key, child in node.items():
        out[str(key)] = value_to_json(child) if is_leaf(child) else _tree_to_json(child)
    return out


def _decode_key(key: str) -> PathKey:
    return int(key) if _CANONICAL_INT.fullmatch(key) else key


def _tree_from_json(node: Mapping[str, Any]) -> dict[PathKey, Any]:
    out: dict[PathKey, Any] = {}
    for key, child in node.items():
        if isinstance(child, dict) and not is_wrapped_leaf(child):
            out[_decode_key(key)] = _tree_from_json(child)
        else:
            out[_decode_key(key)] = value_from_json(child)
    return out


def _pathset_to_json(pathset: PathSet) -> list[JSONValue]:
    out: list[JSONValue] = []
    for part in pathset:
        if isinstance(part, Range):
            out.append({"from": part.start, "to": part.end})
        elif isinstance(part, (list, tuple)):
            out.append(
                [
                    {"from": p.start, "to": p.end} if isinstance(p, Range) else p
                    for p in part
                ]
            )
        else:
            out.append(part)
    return out


def _pathset_from_json(raw: JSONValue) -> PathSet:
    if not isinstance(raw, list):
        raise InvalidArgumentError("Pathset must be a list")

    def _part(value: JSONValue) -> Any:
        if isinstance(value, dict):
            start = value.get("from", 0)
            if "to" in value:
                return Range(int(start), int(value["to"]))  # type: ignore[arg-type]
            length = value.get("length")
            if isinstance(length, int):
                return Range(int(start), int(start) + length - 1)  # type: ignore[arg-type]
            raise InvalidArgumentError(f"Malformed range: {value!r}")
        if isinstance(value, list):
            return [_part(v) for v in value]
        return value

    return tuple(_part(part) for part in raw)


def _as_list(value: JSONValue) -> list[JSONValue]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidArgumentError("Expected a list of pathsets")
    return value
