"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/redis.py.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence

from ..records import Record, record_from_json, record_to_json
from ..types import Key
from .base import RecordCacheBackend

logger = logging.getLogger("pathgraph.cache.redis")


class RedisRecordCache(RecordCacheBackend):
    """Redis-backed record cache for multi-process deployments."""

    backend_id = "redis"

    def __init__(self, redis_client, *, prefix: str = "pathgraph:cache") -> None:
        self._redis = redis_client
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        return self._prefix

    def _name(self, key: Key) -> str:
        # Integer and string keys stay distinct ("7" is not 7).
        tag = "i" if isinstance(key, int) else "s"
        return f"{self._prefix}:{tag}:{key}"

    async def get_many(self, keys: Sequence[Key]) -> dict[Key, Record]:
        if not keys:
            return {}
        blobs = await self._redis.mget([self._name(key) for key in keys])
        out: dict[Key, Record] = {}
        for key, blob in zip(keys, blobs):
            if blob is None:
                continue
            try:
                out[key] = record_from_json(json.loads(blob))
            except (ValueError, TypeError, AttributeError):
                logger.warning("Dropping undecodable cache row %s", self._name(key))
        return out

    async def set_many(
        self,
        records: Mapping[Key, Record],
        *,
        ttl_s: float | None = None,
    ) -> None:
        if not records:
            return
        px = None if ttl_s is None else max(1, int(ttl_s * 1000))
        async with self._redis.pipeline(transaction=True) as pipe:
            for key, record in records.items():
                pipe.set(
                    self._name(key),
                    json.dumps(record_to_json(record), ensure_ascii=True),
                    px=px,
                )
            await pipe.execute()

    async def delete_many(self, keys: Sequence[Key]) -> None:
        if keys:
            await self._redis.delete(*[self._name(key) for key in keys])

    async def clear(self) -> None:
        names = [name async for name in self._redis.scan_iter(match=f"{self._prefix}:*")]
        if names:
            await self._redis.delete(*names)
