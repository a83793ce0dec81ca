"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Fetcher contract and typed policies for the fetch pipeline.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from ..records import Record
from ..types import Key


class Fetcher(Protocol):
    """
    Batch lookup of records by key.

    Implementations receive a duplicate-free key sequence in no particular
    order and return one record per requested key.
    """

    async def __call__(self, keys: Sequence[Key]) -> Mapping[Key, Record]: ...


@dataclass(frozen=True, slots=True)
class CachePolicy:
    """Read-through cache controls."""

    # Store NotFound/Failed records and treat them as hits.
    cache_negative_results: bool = False
    # None keeps entries for the process lifetime.
    ttl_s: float | None = None

    def __post_init__(self) -> None:
        if self.ttl_s is not None and self.ttl_s <= 0:
            raise ValueError("ttl_s must be > 0 when set")


@dataclass(frozen=True, slots=True)
class CoalescingPolicy:
    """Batch coalescing controls."""

    enabled: bool = True
