"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/__init__.py.
"""

from .base import CacheEntry, RecordCacheBackend
from .inmemory import InMemoryRecordCache
from .redis import RedisRecordCache
from .registry import (
    RecordCacheFactory,
    create_record_cache,
    list_record_cache_backends,
    register_record_cache_backend,
)

__all__ = [
    "CacheEntry",
    "RecordCacheBackend",
    "InMemoryRecordCache",
    "RedisRecordCache",
    "RecordCacheFactory",
    "register_record_cache_backend",
    "create_record_cache",
    "list_record_cache_backends",
]
