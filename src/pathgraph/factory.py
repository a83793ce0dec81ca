"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Factory helpers for cache backends and fetch pipelines.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from .cache.base import RecordCacheBackend
from .cache.redis import RedisRecordCache
from .cache.registry import create_record_cache
from .metrics import PipelineMetrics
from .records import Record
from .runtime.cache import ReadThroughCache
from .runtime.coalescing import BatchCoalescer
from .settings import PathGraphSettings
from .types import Key

logger = logging.getLogger("pathgraph.factory")


def create_redis_client(settings: PathGraphSettings) -> Any:
    """Build a `redis.asyncio` client from settings."""
    try:
        import redis.asyncio as redis
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise RuntimeError(
            "Redis cache backend requires `redis` to be installed."
        ) from exc
    return redis.Redis.from_url(settings.redis_url or "redis://localhost:6379/0")


def create_record_cache_from_settings(
    settings: PathGraphSettings,
    *,
    namespace: str,
    redis_client: Any | None = None,
) -> RecordCacheBackend:
    """
    Create the cache backend for one pipeline namespace.

    Backends:
    - `inmemory` (default)
    - `redis`, keyed under `<redis_prefix>:<namespace>`
    - any id registered with `register_record_cache_backend`
    """
    backend = settings.cache_backend.strip().lower()
    if backend in ("mem", "memory", "inmemory", "in_memory"):
        return create_record_cache("inmemory", namespace=namespace)
    if backend == "redis":
        client = redis_client if redis_client is not None else create_redis_client(settings)
        return RedisRecordCache(client, prefix=f"{settings.redis_prefix}:{namespace}")
    return create_record_cache(backend, namespace=namespace)


def build_pipeline(
    fetcher: Callable[[Sequence[Key]], Awaitable[Mapping[Key, Record]]],
    *,
    namespace: str,
    settings: PathGraphSettings | None = None,
    redis_client: Any | None = None,
    metrics: PipelineMetrics | None = None,
) -> ReadThroughCache:
    """Wrap `fetcher` in a coalescer (when enabled) and a read-through cache."""
    settings = settings or PathGraphSettings()
    inner: Callable[[Sequence[Key]], Awaitable[Mapping[Key, Record]]] = fetcher
    if settings.coalescing_policy.enabled:
        inner = BatchCoalescer(fetcher, name=namespace, metrics=metrics)

    logger.debug(
        "Building pipeline '%s' (backend=%s, coalescing=%s, negative_cache=%s)",
        namespace,
        settings.cache_backend,
        settings.coalescing_enabled,
        settings.cache_negative_results,
    )
    return ReadThroughCache(
        inner,
        backend=create_record_cache_from_settings(
            settings, namespace=namespace, redis_client=redis_client
        ),
        policy=settings.cache_policy,
        name=namespace,
        metrics=metrics,
    )
