"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/inmemory.py.
"""

from __future__ import annotations

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from ..records import Record
from ..types import Key
from .base import CacheEntry, RecordCacheBackend


@dataclass(slots=True)
class InMemoryRecordCache(RecordCacheBackend):
    """Process-local record cache; entries live until overwritten unless a TTL is set."""

    backend_id: str = "inmemory"
    _rows: dict[Key, CacheEntry] = field(default_factory=dict, init=False, repr=False)

    async def get_many(self, keys: Sequence[Key]) -> dict[Key, Record]:
        now = time.monotonic()
        out: dict[Key, Record] = {}
        for key in keys:
            row = self._rows.get(key)
            if row is None:
                continue
            if row.expires_at_s is not None and row.expires_at_s < now:
                self._rows.pop(key, None)
                continue
            out[key] = row.value
        return out

    async def set_many(
        self,
        records: Mapping[Key, Record],
        *,
        ttl_s: float | None = None,
    ) -> None:
        expires_at_s = None if ttl_s is None else time.monotonic() + ttl_s
        for key, record in records.items():
            self._rows[key] = CacheEntry(value=record, expires_at_s=expires_at_s)

    async def delete_many(self, keys: Sequence[Key]) -> None:
        for key in keys:
            self._rows.pop(key, None)

    async def clear(self) -> None:
        self._rows.clear()

    @property
    def size(self) -> int:
        return len(self._rows)
