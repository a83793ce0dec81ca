"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/__init__.py.
"""

from .cache import ReadThroughCache
from .coalescing import BatchCoalescer, CoalescerStats
from .contracts import CachePolicy, CoalescingPolicy, Fetcher

__all__ = [
    "BatchCoalescer",
    "CoalescerStats",
    "ReadThroughCache",
    "CachePolicy",
    "CoalescingPolicy",
    "Fetcher",
]
