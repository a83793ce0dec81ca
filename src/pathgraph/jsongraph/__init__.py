"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

JSON Graph values, path syntax, and envelopes.
"""

from .envelope import GraphEnvelope, assemble
from .paths import (
    as_pathset,
    covers,
    expand_pathset,
    format_path,
    integer_keys,
    is_prefix,
    keys_of,
    parse_path,
)
from .values import (
    Atom,
    ErrorValue,
    GraphValue,
    Invalidation,
    KeySet,
    PathSet,
    PathValue,
    Range,
    Ref,
    atom,
    error,
    ref,
    undefined,
    value_from_json,
    value_to_json,
)

__all__ = [
    "Atom",
    "ErrorValue",
    "GraphEnvelope",
    "GraphValue",
    "Invalidation",
    "KeySet",
    "PathSet",
    "PathValue",
    "Range",
    "Ref",
    "as_pathset",
    "assemble",
    "atom",
    "covers",
    "error",
    "expand_pathset",
    "format_path",
    "integer_keys",
    "is_prefix",
    "keys_of",
    "parse_path",
    "ref",
    "undefined",
    "value_from_json",
    "value_to_json",
]
