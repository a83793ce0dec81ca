from __future__ import annotations

import asyncio

import pytest

from pathgraph.cache import InMemoryRecordCache
from pathgraph.errors import BackendError
from pathgraph.records import NOT_FOUND, Failed, Found
from pathgraph.runtime import BatchCoalescer, CachePolicy, ReadThroughCache


def run_async(coro):
    return asyncio.run(coro)


class _Fetcher:
    def __init__(self, records) -> None:
        self.records = records
        self.calls: list[list] = []
        self.fail_with: Exception | None = None

    async def __call__(self, keys):
        self.calls.append(list(keys))
        if self.fail_with is not None:
            raise self.fail_with
        return {key: self.records.get(key, NOT_FOUND) for key in keys}


def test_subset_after_successful_fetch_is_served_from_cache():
    async def scenario() -> None:
        fetcher = _Fetcher({1: Found("A"), 2: Found("B"), 3: Found("C")})
        cache = ReadThroughCache(fetcher)

        first = await cache.fetch([1, 2, 3])
        second = await cache.fetch([3, 1])

        assert fetcher.calls == [[1, 2, 3]]
        assert second == {3: first[3], 1: first[1]}

    run_async(scenario())


def test_only_misses_are_delegated_and_union_is_returned():
    async def scenario() -> None:
        fetcher = _Fetcher({1: Found("A"), 2: Found("B"), 3: Found("C")})
        cache = ReadThroughCache(fetcher)

        await cache.fetch([1])
        out = await cache.fetch([1, 2, 3])

        assert fetcher.calls == [[1], [2, 3]]
        assert out == {1: Found("A"), 2: Found("B"), 3: Found("C")}
        assert list(out) == [1, 2, 3]

    run_async(scenario())


def test_negative_records_are_refetched_by_default():
    async def scenario() -> None:
        fetcher = _Fetcher({1: Found("A")})
        cache = ReadThroughCache(fetcher)

        assert await cache.fetch([9]) == {9: NOT_FOUND}
        assert await cache.fetch([9]) == {9: NOT_FOUND}
        assert fetcher.calls == [[9], [9]]

    run_async(scenario())


def test_negative_records_are_cached_when_enabled():
    async def scenario() -> None:
        fetcher = _Fetcher({1: Found("A"), 5: Failed("boom")})
        cache = ReadThroughCache(
            fetcher, policy=CachePolicy(cache_negative_results=True)
        )

        await cache.fetch([5, 9])
        again = await cache.fetch([9, 5])

        assert fetcher.calls == [[5, 9]]
        assert again == {9: NOT_FOUND, 5: Failed("boom")}

    run_async(scenario())


def test_fetcher_failure_fails_the_call_and_writes_nothing():
    async def scenario() -> None:
        backend = InMemoryRecordCache()
        fetcher = _Fetcher({1: Found("A")})
        fetcher.fail_with = BackendError("down")
        cache = ReadThroughCache(fetcher, backend=backend)

        with pytest.raises(BackendError, match="down"):
            await cache.fetch([1])
        assert backend.size == 0

        fetcher.fail_with = None
        assert await cache.fetch([1]) == {1: Found("A")}

    run_async(scenario())


def test_prime_overwrites_and_invalidate_drops_rows():
    async def scenario() -> None:
        fetcher = _Fetcher({1: Found("A")})
        cache = ReadThroughCache(fetcher)

        await cache.fetch([1])
        await cache.prime({1: Found("A2")})
        assert await cache.fetch([1]) == {1: Found("A2")}
        assert fetcher.calls == [[1]]

        await cache.invalidate([1])
        assert await cache.fetch([1]) == {1: Found("A")}
        assert fetcher.calls == [[1], [1]]

    run_async(scenario())


def test_priming_a_failure_drops_the_stale_positive_row():
    async def scenario() -> None:
        fetcher = _Fetcher({1: Found("A")})
        cache = ReadThroughCache(fetcher)

        await cache.fetch([1])
        await cache.prime({1: Failed("write rejected")})
        await cache.fetch([1])

        assert fetcher.calls == [[1], [1]]

    run_async(scenario())


def test_cache_over_coalescer_merges_concurrent_misses():
    async def scenario() -> None:
        fetcher = _Fetcher({1: Found("A"), 2: Found("B"), 3: Found("C")})
        cache = ReadThroughCache(BatchCoalescer(fetcher))

        first, second = await asyncio.gather(cache([1, 2]), cache([2, 3]))

        assert first == {1: Found("A"), 2: Found("B")}
        assert second == {2: Found("B"), 3: Found("C")}
        assert len(fetcher.calls) == 1
        assert sorted(fetcher.calls[0]) == [1, 2, 3]

        assert await cache([1, 2, 3]) == {1: Found("A"), 2: Found("B"), 3: Found("C")}
        assert len(fetcher.calls) == 1

    run_async(scenario())


def test_cache_policy_rejects_non_positive_ttl():
    with pytest.raises(ValueError, match="ttl_s"):
        CachePolicy(ttl_s=0)


def test_keys_omitted_by_the_fetcher_come_back_failed_and_uncached():
    async def scenario() -> None:
        calls: list[list] = []

        async def partial_fetcher(keys):
            calls.append(list(keys))
            return {key: Found(key) for key in keys if key != 2}

        backend = InMemoryRecordCache()
        cache = ReadThroughCache(
            partial_fetcher,
            backend=backend,
            policy=CachePolicy(cache_negative_results=True),
        )

        out = await cache.fetch([1, 2])
        again = await cache.fetch([2])

        assert out == {1: Found(1), 2: Failed("No record returned", code="missing")}
        assert again == {2: Failed("No record returned", code="missing")}
        assert calls == [[1, 2], [2]]
        assert backend.size == 1

    run_async(scenario())
