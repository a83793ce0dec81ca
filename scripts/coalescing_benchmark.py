#!/usr/bin/env python3
"""
Fetch pipeline benchmark comparing coalesced and direct backend traffic.

Usage examples:
  PYTHONPATH=src python scripts/coalescing_benchmark.py --backend inmemory
  PYTHONPATH=src python scripts/coalescing_benchmark.py --backend redis --redis-url redis://localhost:6379/0
  PYTHONPATH=src python scripts/coalescing_benchmark.py --no-coalescing
"""

from __future__ import annotations

import argparse
import asyncio
import random
import statistics
import time
import uuid

from pathgraph import Found, PathGraphSettings, build_pipeline


class SlowFetcher:
    """Batch fetcher with fixed latency that counts backend round trips."""

    def __init__(self, latency_ms: float) -> None:
        self._latency_s = latency_ms / 1000.0
        self.calls = 0
        self.keys = 0

    async def __call__(self, keys):
        self.calls += 1
        self.keys += len(keys)
        await asyncio.sleep(self._latency_s)
        return {key: Found({"id": key}) for key in keys}


async def run_benchmark(
    *,
    backend: str,
    num_requests: int,
    concurrency: int,
    key_space: int,
    keys_per_request: int,
    latency_ms: float,
    coalescing: bool,
    redis_url: str | None,
) -> None:
    if backend == "redis" and not redis_url:
        raise ValueError("--redis-url is required for redis backend")
    settings = PathGraphSettings(
        cache_backend=backend,
        coalescing_enabled=coalescing,
        redis_url=redis_url,
        redis_prefix=f"bench:{uuid.uuid4().hex}",
    )
    fetcher = SlowFetcher(latency_ms=latency_ms)
    pipeline = build_pipeline(fetcher, namespace="bench", settings=settings)

    semaphore = asyncio.Semaphore(concurrency)
    latencies: list[float] = []
    rng = random.Random(7)

    async def one_request() -> None:
        keys = rng.sample(range(key_space), k=min(keys_per_request, key_space))
        async with semaphore:
            started = time.perf_counter()
            await pipeline(keys)
            latencies.append(time.perf_counter() - started)

    started = time.time()
    await asyncio.gather(*(one_request() for _ in range(num_requests)))
    elapsed = time.time() - started

    throughput = num_requests / elapsed if elapsed > 0 else 0.0
    p50 = statistics.median(latencies) if latencies else 0.0
    p95 = sorted(latencies)[int(0.95 * (len(latencies) - 1))] if latencies else 0.0

    print(f"backend={backend}")
    print(f"coalescing={coalescing}")
    print(f"requests={num_requests}")
    print(f"concurrency={concurrency}")
    print(f"backend_calls={fetcher.calls}")
    print(f"backend_keys={fetcher.keys}")
    print(f"elapsed_s={elapsed:.3f}")
    print(f"throughput_rps={throughput:.2f}")
    print(f"request_p50_ms={p50 * 1000:.2f}")
    print(f"request_p95_ms={p95 * 1000:.2f}")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Fetch pipeline benchmark utility")
    parser.add_argument("--backend", choices=("inmemory", "redis"), default="inmemory")
    parser.add_argument("--num-requests", type=int, default=500)
    parser.add_argument("--concurrency", type=int, default=64)
    parser.add_argument("--key-space", type=int, default=200)
    parser.add_argument("--keys-per-request", type=int, default=5)
    parser.add_argument("--latency-ms", type=float, default=10.0)
    parser.add_argument("--no-coalescing", action="store_true")
    parser.add_argument("--redis-url", type=str, default=None)
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    asyncio.run(
        run_benchmark(
            backend=args.backend,
            num_requests=args.num_requests,
            concurrency=args.concurrency,
            key_space=args.key_space,
            keys_per_request=args.keys_per_request,
            latency_ms=args.latency_ms,
            coalescing=not args.no_coalescing,
            redis_url=args.redis_url,
        )
    )


if __name__ == "__main__":
    main()
