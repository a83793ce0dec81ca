"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Shared type aliases for keys, paths, and JSON payloads.
"""

from __future__ import annotations

from typing import TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]

# Opaque backend identifier (title id, user id, genre list id).
Key: TypeAlias = str | int

PathKey: TypeAlias = str | int
Path: TypeAlias = tuple[PathKey, ...]
