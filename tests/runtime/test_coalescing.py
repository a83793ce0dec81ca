from __future__ import annotations

import asyncio

import pytest

from pathgraph.errors import BackendError
from pathgraph.runtime import BatchCoalescer


def run_async(coro):
    return asyncio.run(coro)


async def _settle(turns: int = 3) -> None:
    for _ in range(turns):
        await asyncio.sleep(0)


class _RecordingFetcher:
    def __init__(self, data=None, *, gate: asyncio.Event | None = None) -> None:
        self.data = data or {}
        self.calls: list[list] = []
        self.gate = gate
        self.fail_with: Exception | None = None

    async def __call__(self, keys):
        self.calls.append(list(keys))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return {key: self.data[key] for key in keys if key in self.data}


def test_concurrent_requests_share_one_fetch_and_receive_their_slice():
    async def scenario() -> None:
        fetcher = _RecordingFetcher({1: "A", 2: "B", 3: "C"})
        coalescer = BatchCoalescer(fetcher)

        first, second = await asyncio.gather(
            coalescer.fetch({1, 2}),
            coalescer.fetch({2, 3}),
        )

        assert first == {1: "A", 2: "B"}
        assert second == {2: "B", 3: "C"}
        assert len(fetcher.calls) == 1
        assert set(fetcher.calls[0]) == {1, 2, 3}

    run_async(scenario())


def test_duplicate_keys_are_dispatched_once():
    async def scenario() -> None:
        fetcher = _RecordingFetcher({1: "A", 2: "B"})
        coalescer = BatchCoalescer(fetcher)

        results = await asyncio.gather(
            coalescer([1, 1, 2]),
            coalescer([2, 1]),
            coalescer([2]),
        )

        assert results == [{1: "A", 2: "B"}, {2: "B", 1: "A"}, {2: "B"}]
        assert fetcher.calls == [[1, 2]]

    run_async(scenario())


def test_request_after_flush_starts_a_new_batch():
    async def scenario() -> None:
        gate = asyncio.Event()
        fetcher = _RecordingFetcher({1: "A", 2: "B"}, gate=gate)
        coalescer = BatchCoalescer(fetcher)

        first = asyncio.create_task(coalescer.fetch([1]))
        await _settle()
        # First batch is now outstanding inside the fetcher.
        assert fetcher.calls == [[1]]

        second = asyncio.create_task(coalescer.fetch([2]))
        await _settle()
        assert fetcher.calls == [[1], [2]]

        gate.set()
        assert await first == {1: "A"}
        assert await second == {2: "B"}
        assert coalescer.stats.batches == 2

    run_async(scenario())


def test_batch_failure_reaches_every_waiter_and_does_not_poison_next_batch():
    async def scenario() -> None:
        fetcher = _RecordingFetcher({1: "A", 2: "B"})
        fetcher.fail_with = BackendError("store offline")
        coalescer = BatchCoalescer(fetcher)

        results = await asyncio.gather(
            coalescer.fetch([1]),
            coalescer.fetch([2]),
            return_exceptions=True,
        )
        assert all(isinstance(r, BackendError) for r in results)
        assert results[0] is results[1]
        assert len(fetcher.calls) == 1

        fetcher.fail_with = None
        assert await coalescer.fetch([1, 2]) == {1: "A", 2: "B"}
        assert len(fetcher.calls) == 2

    run_async(scenario())


def test_cancelled_caller_does_not_cancel_shared_batch():
    async def scenario() -> None:
        gate = asyncio.Event()
        fetcher = _RecordingFetcher({1: "A", 2: "B"}, gate=gate)
        coalescer = BatchCoalescer(fetcher)

        abandoned = asyncio.create_task(coalescer.fetch([1]))
        kept = asyncio.create_task(coalescer.fetch([2]))
        await _settle()
        abandoned.cancel()
        await _settle()
        gate.set()

        assert await kept == {2: "B"}
        with pytest.raises(asyncio.CancelledError):
            await abandoned

    run_async(scenario())


def test_empty_request_skips_fetcher():
    async def scenario() -> None:
        fetcher = _RecordingFetcher()
        coalescer = BatchCoalescer(fetcher)

        assert await coalescer.fetch([]) == {}
        assert fetcher.calls == []
        assert coalescer.stats.requests == 0

    run_async(scenario())


def test_keys_missing_from_batch_result_are_left_out():
    async def scenario() -> None:
        fetcher = _RecordingFetcher({1: "A"})
        coalescer = BatchCoalescer(fetcher)

        assert await coalescer.fetch([1, 9]) == {1: "A"}

    run_async(scenario())


def test_stats_and_metrics_track_batches():
    class _Metrics:
        def __init__(self) -> None:
            self.rows: list[tuple[str, int, dict]] = []

        def incr(self, name, value=1, *, tags=None):
            self.rows.append((name, value, dict(tags or {})))

    async def scenario() -> None:
        metrics = _Metrics()
        fetcher = _RecordingFetcher({1: "A", 2: "B", 3: "C"})
        coalescer = BatchCoalescer(fetcher, name="titles", metrics=metrics)

        await asyncio.gather(coalescer([1, 2]), coalescer([3]))

        assert coalescer.stats.requests == 2
        assert coalescer.stats.batches == 1
        assert coalescer.stats.keys_dispatched == 3
        assert ("coalescer_keys_total", 3, {"coalescer": "titles"}) in metrics.rows
        assert [r[0] for r in metrics.rows].count("coalescer_requests_total") == 2

    run_async(scenario())
