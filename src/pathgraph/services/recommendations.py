"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Genre lists backed by the recommendations document store.

Each list document is keyed by user id (``"all"`` for the shared list) and
holds ``recommendations: [{"name": str, "titles": [title id, ...]}, ...]``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidArgumentError
from ..records import Record
from ..store.base import DocumentStore
from ..types import JSONObject, Key
from .base import call_store, rows_to_records

logger = logging.getLogger("pathgraph.services.recommendations")


@dataclass(frozen=True, slots=True)
class GenreListUpdate:
    """Result of one genre list mutation."""

    list_id: str
    recommendations: list[dict[str, Any]]
    genre_index: int
    old_length: int
    new_length: int


class RecommendationService:
    """Batch fetcher and mutations for per-user genre lists."""

    def __init__(self, store: DocumentStore, *, default_list_id: str = "all") -> None:
        self._store = store
        self._default_list_id = default_list_id

    def list_id_for(self, identity: str | None) -> str:
        return str(identity) if identity else self._default_list_id

    async def get_genre_lists(self, list_ids: Sequence[Key]) -> dict[Key, Record]:
        logger.debug("get_genre_lists(%s)", list(list_ids))
        doc_ids = [str(list_id) for list_id in list_ids]
        rows = await call_store(
            "get_genre_lists", lambda: self._store.all_docs(doc_ids)
        )
        return rows_to_records(list_ids, doc_ids, rows, value=_recommendations_of)

    async def add_title(
        self,
        list_id: str,
        genre_index: int,
        title_id: int,
    ) -> GenreListUpdate:
        """Append ``title_id`` to one genre and persist the list."""
        doc, genre = await self._load_genre(list_id, genre_index)
        titles = genre.setdefault("titles", [])
        old_length = len(titles)
        titles.append(title_id)
        await call_store("add_title", lambda: self._store.put(doc))
        logger.debug("add_title(%s, %d, %d) -> length %d", list_id, genre_index, title_id, len(titles))
        return GenreListUpdate(
            list_id=list_id,
            recommendations=doc["recommendations"],
            genre_index=genre_index,
            old_length=old_length,
            new_length=len(titles),
        )

    async def remove_title(
        self,
        list_id: str,
        genre_index: int,
        title_index: int,
    ) -> GenreListUpdate:
        """Remove the title at ``title_index`` from one genre and persist the list."""
        doc, genre = await self._load_genre(list_id, genre_index)
        titles = genre.setdefault("titles", [])
        old_length = len(titles)
        if not 0 <= title_index < old_length:
            raise InvalidArgumentError(
                f"Title index {title_index} out of range for genre {genre_index}"
            )
        del titles[title_index]
        await call_store("remove_title", lambda: self._store.put(doc))
        logger.debug("remove_title(%s, %d, %d) -> length %d", list_id, genre_index, title_index, len(titles))
        return GenreListUpdate(
            list_id=list_id,
            recommendations=doc["recommendations"],
            genre_index=genre_index,
            old_length=old_length,
            new_length=len(titles),
        )

    async def _load_genre(
        self,
        list_id: str,
        genre_index: int,
    ) -> tuple[JSONObject, dict[str, Any]]:
        doc = await call_store("load_genre_list", lambda: self._store.get(list_id))
        recommendations = doc.get("recommendations") or []
        if not 0 <= genre_index < len(recommendations):
            raise InvalidArgumentError(
                f"Genre index {genre_index} out of range for list '{list_id}'"
            )
        return doc, recommendations[genre_index]


def _recommendations_of(doc: JSONObject) -> list[Any]:
    return list(doc.get("recommendations") or [])
