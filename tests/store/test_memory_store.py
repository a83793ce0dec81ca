from __future__ import annotations

import asyncio

import pytest

from pathgraph.errors import BackendError
from pathgraph.store import (
    CONFLICT_ERROR,
    NOT_FOUND_ERROR,
    DocumentConflictError,
    DocumentNotFoundError,
    DocumentStore,
    InMemoryDocumentStore,
)


def run_async(coro):
    return asyncio.run(coro)


def test_all_docs_returns_rows_in_key_order():
    async def scenario() -> None:
        store = InMemoryDocumentStore([{"_id": "1", "name": "A"}, {"_id": "2", "name": "B"}])
        store.inject_error("3", "disk on fire")

        rows = await store.all_docs(["2", "9", "3", "1"])

        assert [row.key for row in rows] == ["2", "9", "3", "1"]
        assert rows[0].doc["name"] == "B"
        assert rows[0].rev.startswith("1-")
        assert rows[1].error == NOT_FOUND_ERROR
        assert rows[2].error == "disk on fire"
        assert rows[3].doc["_id"] == "1"
        assert store.reads == 1

    run_async(scenario())


def test_documents_are_copied_in_and_out():
    async def scenario() -> None:
        source = {"_id": "all", "recommendations": [{"name": "Drama", "titles": [1]}]}
        store = InMemoryDocumentStore([source])
        source["recommendations"][0]["titles"].append(99)

        doc = await store.get("all")
        doc["recommendations"][0]["titles"].append(42)

        assert store.peek("all")["recommendations"][0]["titles"] == [1]

    run_async(scenario())


def test_get_distinguishes_missing_from_backend_errors():
    async def scenario() -> None:
        store = InMemoryDocumentStore()
        store.inject_error("broken", "timeout")

        with pytest.raises(DocumentNotFoundError):
            await store.get("missing")
        with pytest.raises(BackendError, match="timeout"):
            await store.get("broken")

    run_async(scenario())


def test_put_requires_the_current_revision():
    async def scenario() -> None:
        store = InMemoryDocumentStore()
        first = await store.put({"_id": "u,1", "rating": 3})
        second = await store.put({"_id": "u,1", "_rev": first, "rating": 4})

        assert first.startswith("1-")
        assert second.startswith("2-")
        with pytest.raises(DocumentConflictError):
            await store.put({"_id": "u,1", "_rev": first, "rating": 5})
        with pytest.raises(DocumentConflictError):
            await store.put({"_id": "u,1", "rating": 5})
        assert store.peek("u,1")["rating"] == 4
        assert store.writes == 2

    run_async(scenario())


def test_bulk_docs_reports_failures_per_row():
    async def scenario() -> None:
        store = InMemoryDocumentStore([{"_id": "a", "v": 1}])
        store.inject_error("c", "quota exceeded")

        results = await store.bulk_docs(
            [{"_id": "a", "v": 2}, {"_id": "b", "v": 1}, {"_id": "c", "v": 1}]
        )

        assert [r.ok for r in results] == [False, True, False]
        assert results[0].error == CONFLICT_ERROR
        assert results[2].reason == "quota exceeded"
        assert store.peek("a")["v"] == 1
        assert store.writes == 1

    run_async(scenario())


def test_memory_store_satisfies_protocol():
    assert isinstance(InMemoryDocumentStore(), DocumentStore)
