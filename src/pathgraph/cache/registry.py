"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/registry.py.

Backends are registered as factories so every pipeline namespace gets its own
instance; two read-through caches never share rows.
"""

from __future__ import annotations

from collections.abc import Callable
from threading import Lock

from ..errors import CacheBackendError
from .base import RecordCacheBackend
from .inmemory import InMemoryRecordCache

RecordCacheFactory = Callable[[str], RecordCacheBackend]

_REGISTRY: dict[str, RecordCacheFactory] = {}
_LOCK = Lock()


def register_record_cache_backend(
    backend_id: str,
    factory: RecordCacheFactory,
    *,
    overwrite: bool = False,
) -> None:
    """Register one cache backend factory by id."""
    key = backend_id.strip().lower()
    if not key:
        raise CacheBackendError("Cache backend id must be non-empty")

    with _LOCK:
        if key in _REGISTRY and not overwrite:
            raise CacheBackendError(f"Cache backend already registered: {key}")
        _REGISTRY[key] = factory


def create_record_cache(
    backend: str | RecordCacheBackend | None = None,
    *,
    namespace: str = "default",
) -> RecordCacheBackend:
    """Resolve a fresh cache backend instance from id/instance/default."""
    if backend is None:
        return InMemoryRecordCache()

    if not isinstance(backend, str):
        return backend

    key = backend.strip().lower()
    with _LOCK:
        factory = _REGISTRY.get(key)
    if factory is None:
        raise CacheBackendError(f"Unknown record cache backend '{backend}'")
    return factory(namespace)


def list_record_cache_backends() -> list[str]:
    """List registered cache backend ids."""
    with _LOCK:
        return sorted(_REGISTRY.keys())


register_record_cache_backend("inmemory", lambda namespace: InMemoryRecordCache())
