from __future__ import annotations

import asyncio

import pytest

from pathgraph.errors import BackendError, InvalidArgumentError
from pathgraph.records import NOT_FOUND, Failed, Found
from pathgraph.services import (
    RatingService,
    RecommendationService,
    TitleService,
    call_store,
    row_to_record,
)
from pathgraph.store import DocumentNotFoundError, DocumentRow, InMemoryDocumentStore


def run_async(coro):
    return asyncio.run(coro)


def _lists_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore(
        [
            {
                "_id": "all",
                "recommendations": [
                    {"name": "Drama", "titles": [1, 2]},
                    {"name": "Comedy", "titles": []},
                ],
            }
        ]
    )


def test_row_to_record_covers_every_row_shape():
    assert row_to_record(None) == Failed("Store returned no row", code="missing")
    assert row_to_record(DocumentRow(key="1", error="not_found")) is NOT_FOUND
    assert row_to_record(DocumentRow(key="1", error="timeout")) == Failed("timeout")
    assert row_to_record(
        DocumentRow(key="1", doc={"_id": "1", "_rev": "1-x", "name": "A"})
    ) == Found({"name": "A"})


def test_call_store_wraps_foreign_exceptions():
    async def boom():
        raise ConnectionError("reset")

    async def missing():
        raise DocumentNotFoundError("gone")

    async def scenario() -> None:
        with pytest.raises(BackendError, match="get_titles failed: reset") as info:
            await call_store("get_titles", boom)
        assert isinstance(info.value.__cause__, ConnectionError)
        with pytest.raises(DocumentNotFoundError):
            await call_store("get", missing)

    run_async(scenario())


def test_title_service_maps_rows_to_caller_keys():
    async def scenario() -> None:
        store = InMemoryDocumentStore([{"_id": "1", "name": "A", "year": 1999}])
        store.inject_error("3", "timeout")
        service = TitleService(store)

        records = await service.get_titles([1, 2, 3])

        assert records == {
            1: Found({"name": "A", "year": 1999}),
            2: NOT_FOUND,
            3: Failed("timeout"),
        }

    run_async(scenario())


def test_rating_service_clamps_and_updates_existing_documents():
    async def scenario() -> None:
        store = InMemoryDocumentStore([{"_id": "alice,1", "rating": 2}])
        service = RatingService(store)

        written = await service.set_ratings("alice", {1: 9, 2: -3, 3: 3.5})

        assert written == {1: Found(5), 2: Found(1), 3: Found(3.5)}
        assert store.peek("alice,1")["_rev"].startswith("2-")
        assert await service.get_ratings("alice", [1, 2, 4]) == {
            1: Found(5),
            2: Found(1),
            4: NOT_FOUND,
        }
        assert await service.get_rating_docs(["alice,1", "bob,1"]) == {
            "alice,1": Found(5),
            "bob,1": NOT_FOUND,
        }

    run_async(scenario())


def test_rating_service_reports_failed_writes_per_title():
    async def scenario() -> None:
        store = InMemoryDocumentStore()
        store.inject_error("alice,2", "quota exceeded")
        service = RatingService(store)

        written = await service.set_ratings("alice", {1: 4, 2: 4})

        assert written[1] == Found(4)
        assert written[2] == Failed("quota exceeded", code="quota exceeded")

    run_async(scenario())


def test_rating_service_rejects_inverted_bounds():
    with pytest.raises(ValueError):
        RatingService(InMemoryDocumentStore(), rating_min=5, rating_max=1)


def test_recommendation_service_reads_lists_and_defaults_list_id():
    async def scenario() -> None:
        service = RecommendationService(_lists_store())

        records = await service.get_genre_lists(["all", "bob"])

        assert records["all"].value[0] == {"name": "Drama", "titles": [1, 2]}
        assert records["bob"] is NOT_FOUND
        assert service.list_id_for(None) == "all"
        assert service.list_id_for("bob") == "bob"

    run_async(scenario())


def test_add_and_remove_title_persist_the_list():
    async def scenario() -> None:
        store = _lists_store()
        service = RecommendationService(store)

        added = await service.add_title("all", 1, 7)
        assert (added.old_length, added.new_length) == (0, 1)
        assert store.peek("all")["recommendations"][1]["titles"] == [7]

        removed = await service.remove_title("all", 0, 0)
        assert (removed.old_length, removed.new_length) == (2, 1)
        assert removed.recommendations[0]["titles"] == [2]
        assert store.peek("all")["recommendations"][0]["titles"] == [2]

    run_async(scenario())


def test_mutations_reject_bad_indexes_and_missing_lists():
    async def scenario() -> None:
        service = RecommendationService(_lists_store())

        with pytest.raises(InvalidArgumentError):
            await service.add_title("all", 5, 7)
        with pytest.raises(InvalidArgumentError):
            await service.remove_title("all", 0, 2)
        with pytest.raises(DocumentNotFoundError):
            await service.add_title("nobody", 0, 7)

    run_async(scenario())
