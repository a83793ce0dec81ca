"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Handler contract and the record-to-path-value resolution policy.

Every requested path must come back as a value, a known-empty atom, or an
error at that path or one of its ancestors:

- found, field present: value at ``key path + field``
- found, field is a foreign id: ``Ref`` to the foreign entity's root path
- found, field missing: ``Atom(None)`` at ``key path + field``
- not found: ``Atom(None)`` at the key path
- error or no record: ``ErrorValue`` at the key path
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from ..jsongraph.values import Atom, GraphValue, PathValue, Ref, error, undefined
from ..records import Failed, Found, NotFound, Record
from ..types import Path, PathKey

_MISSING_MESSAGE = "No record returned"


@dataclass(frozen=True, slots=True)
class HandlerContext:
    """Per-request caller information handed to every handler operation."""

    identity: str | None = None
    request_id: str | None = None


class RouteHandler(Protocol):
    """
    Handler for one route pattern.

    ``route`` documents the path pattern served; matching and dispatch belong
    to the router. Handlers implement whichever of ``get``, ``set`` and
    ``call`` their route supports.
    """

    route: str


def to_leaf(value: Any) -> GraphValue:
    """Wrap a backend value so it is a legal graph leaf."""
    if value is None:
        return undefined()
    if isinstance(value, (Atom, Ref)):
        return value
    if isinstance(value, (dict, list, tuple)):
        return Atom(value=value if not isinstance(value, tuple) else list(value))
    return value


def resolve_leaf(path: Sequence[PathKey], record: Record | None) -> PathValue:
    """Resolve a record whose whole value lives at ``path``."""
    target = tuple(path)
    if isinstance(record, Found):
        return PathValue(path=target, value=to_leaf(record.value))
    if isinstance(record, NotFound):
        return PathValue(path=target, value=undefined())
    if isinstance(record, Failed):
        return PathValue(path=target, value=error(record.message))
    return PathValue(path=target, value=error(_MISSING_MESSAGE))


def resolve_entity(
    key_path: Sequence[PathKey],
    record: Record | None,
    fields: Sequence[PathKey],
    *,
    refs: Mapping[PathKey, Path] | None = None,
) -> list[PathValue]:
    """Resolve requested ``fields`` of one entity record under ``key_path``."""
    base = tuple(key_path)
    if not isinstance(record, Found):
        return [resolve_leaf(base, record)]

    doc = record.value if isinstance(record.value, Mapping) else {}
    out: list[PathValue] = []
    for field in fields:
        raw = doc.get(field)
        target = (refs or {}).get(field)
        if target is not None and raw is not None:
            out.append(PathValue(path=base + (field,), value=Ref(path=tuple(target) + (raw,))))
        else:
            out.append(PathValue(path=base + (field,), value=to_leaf(raw)))
    return out


def item_at(items: Sequence[Any], index: int) -> Any:
    """Return ``items[index]`` for in-range non-negative indices, else ``None``."""
    if 0 <= index < len(items):
        return items[index]
    return None
