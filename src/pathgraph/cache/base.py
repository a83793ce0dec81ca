"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: cache/base.py.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from ..records import Record
from ..types import Key


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """One cached record with optional expiration."""

    value: Record
    expires_at_s: float | None = None


class RecordCacheBackend(Protocol):
    """Protocol implemented by record stores used by the read-through cache."""

    backend_id: str

    async def get_many(self, keys: Sequence[Key]) -> dict[Key, Record]: ...

    async def set_many(
        self,
        records: Mapping[Key, Record],
        *,
        ttl_s: float | None = None,
    ) -> None: ...

    async def delete_many(self, keys: Sequence[Key]) -> None: ...

    async def clear(self) -> None: ...
