"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Tagged per-key outcomes returned by fetchers.

Services decide the variant once, at the fetcher boundary. Caches, coalescers,
and handlers consume the variants without re-inspecting backend payloads.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from .types import JSONObject, JSONValue


@dataclass(frozen=True, slots=True)
class Found:
    """The backend returned a value for the key."""

    value: Any
    kind: Literal["found"] = "found"


@dataclass(frozen=True, slots=True)
class NotFound:
    """The backend knows the key does not exist."""

    kind: Literal["not_found"] = "not_found"


@dataclass(frozen=True, slots=True)
class Failed:
    """The backend could not resolve the key."""

    message: str
    code: str = "backend_error"
    kind: Literal["error"] = "error"


Record: TypeAlias = Found | NotFound | Failed

NOT_FOUND = NotFound()


def record_to_json(record: Record) -> JSONObject:
    """Encode one record as a JSON-compatible object."""
    if isinstance(record, Found):
        return {"kind": "found", "value": record.value}
    if isinstance(record, NotFound):
        return {"kind": "not_found"}
    return {"kind": "error", "message": record.message, "code": record.code}


def record_from_json(row: Mapping[str, JSONValue]) -> Record:
    """Decode one record encoded by ``record_to_json``."""
    kind = row.get("kind")
    if kind == "found":
        return Found(value=row.get("value"))
    if kind == "not_found":
        return NOT_FOUND
    if kind == "error":
        return Failed(
            message=str(row.get("message", "")),
            code=str(row.get("code") or "backend_error"),
        )
    raise ValueError(f"Unknown record kind: {kind!r}")
