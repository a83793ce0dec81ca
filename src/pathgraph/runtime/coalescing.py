"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Module: runtime/coalescing.py.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from ..metrics import NoOpPipelineMetrics, PipelineMetrics
from ..types import Key

V = TypeVar("V")

logger = logging.getLogger("pathgraph.runtime.coalescing")


@dataclass(slots=True)
class CoalescerStats:
    """Counters for one coalescer instance."""

    requests: int = 0
    batches: int = 0
    keys_dispatched: int = 0


class BatchCoalescer(Generic[V]):
    """
    Merge concurrent key lookups into one fetcher call per loop turn.

    The first request into an empty accumulator schedules a dispatch task.
    Every request made before that task runs joins the same batch. The
    dispatch snapshots and resets the accumulator before awaiting the fetcher,
    so requests arriving while the fetcher is outstanding start a new batch.
    Each caller receives only the keys it asked for.
    """

    def __init__(
        self,
        fetcher: Callable[[Sequence[Key]], Awaitable[Mapping[Key, V]]],
        *,
        name: str = "default",
        metrics: PipelineMetrics | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._name = name
        self._metrics: PipelineMetrics = metrics or NoOpPipelineMetrics()
        self._pending: dict[Key, None] = {}
        self._batch: asyncio.Future[Mapping[Key, V]] | None = None
        self._dispatches: set[asyncio.Task[None]] = set()
        self.stats = CoalescerStats()

    @property
    def name(self) -> str:
        return self._name

    async def __call__(self, keys: Iterable[Key]) -> dict[Key, V]:
        return await self.fetch(keys)

    async def fetch(self, keys: Iterable[Key]) -> dict[Key, V]:
        """Resolve ``keys`` through the shared batch for the current loop turn."""
        requested = list(dict.fromkeys(keys))
        if not requested:
            return {}

        self.stats.requests += 1
        self._metrics.incr("coalescer_requests_total", tags={"coalescer": self._name})

        batch = self._batch
        if batch is None:
            loop = asyncio.get_running_loop()
            batch = loop.create_future()
            self._batch = batch
            task = loop.create_task(self._dispatch(batch))
            self._dispatches.add(task)
            task.add_done_callback(self._dispatches.discard)
        self._pending.update(dict.fromkeys(requested))

        # Shielded so one cancelled caller cannot cancel the shared batch.
        results = await asyncio.shield(batch)
        return {key: results[key] for key in requested if key in results}

    async def _dispatch(self, batch: asyncio.Future[Mapping[Key, V]]) -> None:
        keys = list(self._pending)
        self._pending = {}
        self._batch = None

        self.stats.batches += 1
        self.stats.keys_dispatched += len(keys)
        self._metrics.incr("coalescer_batches_total", tags={"coalescer": self._name})
        self._metrics.incr(
            "coalescer_keys_total", len(keys), tags={"coalescer": self._name}
        )
        logger.debug("Dispatching batch of %d keys for coalescer '%s'", len(keys), self._name)

        try:
            results = await self._fetcher(keys)
        except asyncio.CancelledError:
            batch.cancel()
            raise
        except Exception as exc:
            self._metrics.incr(
                "coalescer_failures_total", tags={"coalescer": self._name}
            )
            logger.warning(
                "Batch of %d keys failed for coalescer '%s': %s",
                len(keys),
                self._name,
                exc,
            )
            batch.set_exception(exc)
            return
        batch.set_result(results)
