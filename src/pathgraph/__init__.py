"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Path-addressed graph query primitives.

Provides request coalescing and read-through caching over batch fetchers,
plus the JSON Graph value model handlers use to answer path queries.

Quick start::

    from pathgraph import BatchCoalescer, ReadThroughCache

    titles = ReadThroughCache(BatchCoalescer(title_service.get_titles))
    records = await titles([523, 829])
"""

from .errors import (
    BackendError,
    CacheBackendError,
    InvalidArgumentError,
    NotFoundError,
    PathGraphError,
    UnauthorizedError,
)
from .factory import build_pipeline, create_record_cache_from_settings
from .jsongraph import (
    Atom,
    ErrorValue,
    GraphEnvelope,
    Invalidation,
    PathValue,
    Range,
    Ref,
    assemble,
    atom,
    error,
    expand_pathset,
    parse_path,
    ref,
    undefined,
)
from .records import NOT_FOUND, Failed, Found, NotFound, Record
from .runtime import (
    BatchCoalescer,
    CachePolicy,
    CoalescingPolicy,
    Fetcher,
    ReadThroughCache,
)
from .settings import PathGraphSettings

__all__ = [
    "Atom",
    "BackendError",
    "BatchCoalescer",
    "CacheBackendError",
    "CachePolicy",
    "CoalescingPolicy",
    "ErrorValue",
    "Failed",
    "Fetcher",
    "Found",
    "GraphEnvelope",
    "InvalidArgumentError",
    "Invalidation",
    "NOT_FOUND",
    "NotFound",
    "NotFoundError",
    "PathGraphError",
    "PathGraphSettings",
    "PathValue",
    "Range",
    "ReadThroughCache",
    "Record",
    "Ref",
    "UnauthorizedError",
    "assemble",
    "atom",
    "build_pipeline",
    "create_record_cache_from_settings",
    "error",
    "expand_pathset",
    "parse_path",
    "ref",
    "undefined",
]
