"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/cache.py.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence

from ..cache.base import RecordCacheBackend
from ..cache.inmemory import InMemoryRecordCache
from ..metrics import NoOpPipelineMetrics, PipelineMetrics
from ..records import Failed, Found, Record
from ..types import Key
from .contracts import CachePolicy

logger = logging.getLogger("pathgraph.runtime.cache")

_MISSING_MESSAGE = "No record returned"


class ReadThroughCache:
    """
    Serve cached records and delegate only misses to the wrapped fetcher.

    Fresh records are written in one batch after the fetcher fully resolves,
    so a failing fetcher leaves the cache untouched. With the default policy
    only ``Found`` records are cached; ``NotFound``/``Failed`` outcomes are
    re-fetched on every call unless ``cache_negative_results`` is set.
    """

    def __init__(
        self,
        fetcher: Callable[[Sequence[Key]], Awaitable[Mapping[Key, Record]]],
        *,
        backend: RecordCacheBackend | None = None,
        policy: CachePolicy | None = None,
        name: str = "default",
        metrics: PipelineMetrics | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._backend: RecordCacheBackend = (
            backend if backend is not None else InMemoryRecordCache()
        )
        self._policy = policy or CachePolicy()
        self._name = name
        self._metrics: PipelineMetrics = metrics or NoOpPipelineMetrics()

    @property
    def fetcher(self) -> Callable[[Sequence[Key]], Awaitable[Mapping[Key, Record]]]:
        return self._fetcher

    @property
    def policy(self) -> CachePolicy:
        return self._policy

    @property
    def backend(self) -> RecordCacheBackend:
        return self._backend

    async def __call__(self, keys: Iterable[Key]) -> dict[Key, Record]:
        return await self.fetch(keys)

    def _storable(self, record: Record) -> bool:
        return self._policy.cache_negative_results or isinstance(record, Found)

    async def fetch(self, keys: Iterable[Key]) -> dict[Key, Record]:
        """Return records for every requested key, fetching only cache misses."""
        requested = list(dict.fromkeys(keys))
        if not requested:
            return {}

        cached = await self._backend.get_many(requested)
        hits = {key: rec for key, rec in cached.items() if self._storable(rec)}
        misses = [key for key in requested if key not in hits]

        tags = {"cache": self._name}
        if hits:
            self._metrics.incr("cache_hits_total", len(hits), tags=tags)
        if misses:
            self._metrics.incr("cache_misses_total", len(misses), tags=tags)
        logger.debug(
            "Cache '%s': %d hits, %d misses", self._name, len(hits), len(misses)
        )

        if not misses:
            return {key: hits[key] for key in requested}

        fresh = await self._fetcher(misses)
        await self._write(fresh)

        out: dict[Key, Record] = {}
        for key in requested:
            if key in fresh:
                out[key] = fresh[key]
            elif key in hits:
                out[key] = hits[key]
            else:
                # Fetcher omitted the key; reported, never cached.
                out[key] = Failed(message=_MISSING_MESSAGE, code="missing")
        return out

    async def prime(self, records: Mapping[Key, Record]) -> None:
        """Overwrite cache rows with records produced by a mutation."""
        await self._write(records)

    async def invalidate(self, keys: Iterable[Key]) -> None:
        """Drop cache rows so the next lookup goes to the fetcher."""
        await self._backend.delete_many(list(dict.fromkeys(keys)))

    async def _write(self, records: Mapping[Key, Record]) -> None:
        storable = {key: rec for key, rec in records.items() if self._storable(rec)}
        # Non-storable outcomes must not leave an older positive row behind.
        stale = [key for key in records if key not in storable]
        if stale:
            await self._backend.delete_many(stale)
        if storable:
            await self._backend.set_many(storable, ttl_s=self._policy.ttl_s)
