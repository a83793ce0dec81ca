"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Per-user title ratings backed by the ratings document store.

Rating documents are keyed ``"<user id>,<title id>"`` and hold a single
``rating`` number.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from ..records import Failed, Found, Record
from ..store.base import DocumentStore
from ..types import JSONObject, Key
from .base import call_store, rows_to_records

logger = logging.getLogger("pathgraph.services.ratings")


class RatingService:
    """Read and write per-user ratings, clamping writes into the allowed range."""

    def __init__(
        self,
        store: DocumentStore,
        *,
        rating_min: float = 1,
        rating_max: float = 5,
    ) -> None:
        if rating_min > rating_max:
            raise ValueError("rating_min must be <= rating_max")
        self._store = store
        self._rating_min = rating_min
        self._rating_max = rating_max

    def coerce(self, rating: float) -> float:
        """Clamp ``rating`` into ``[rating_min, rating_max]``."""
        if rating > self._rating_max:
            return self._rating_max
        if rating < self._rating_min:
            return self._rating_min
        return rating

    @staticmethod
    def doc_id(user_id: str, title_id: Key) -> str:
        return f"{user_id},{title_id}"

    async def get_rating_docs(self, doc_ids: Sequence[Key]) -> dict[Key, Record]:
        """
        Batch fetcher keyed by rating document id.

        Keys from any number of users are resolved with one store read, so a
        single coalesced pipeline can serve every caller.
        """
        logger.debug("get_rating_docs(%s)", list(doc_ids))
        ids = [str(doc_id) for doc_id in doc_ids]
        rows = await call_store("get_ratings", lambda: self._store.all_docs(ids))
        return rows_to_records(doc_ids, ids, rows, value=_rating_of)

    async def get_ratings(
        self,
        user_id: str,
        title_ids: Sequence[Key],
    ) -> dict[Key, Record]:
        logger.debug("get_ratings(%s, %s)", user_id, list(title_ids))
        doc_ids = [self.doc_id(user_id, title_id) for title_id in title_ids]
        by_doc = await self.get_rating_docs(doc_ids)
        return {title_id: by_doc[doc_id] for title_id, doc_id in zip(title_ids, doc_ids)}

    async def set_ratings(
        self,
        user_id: str,
        ratings: Mapping[Key, float],
    ) -> dict[Key, Record]:
        """
        Write ratings for one user.

        Existing documents are updated in place using their current revision.
        Each title's outcome is reported as a record: ``Found`` with the
        stored (coerced) rating, or ``Failed`` with the store's reason.
        """
        title_ids = list(ratings)
        logger.debug("set_ratings(%s, %s)", user_id, dict(ratings))
        doc_ids = [self.doc_id(user_id, title_id) for title_id in title_ids]
        current = await call_store("set_ratings", lambda: self._store.all_docs(doc_ids))
        revs = {row.key: row.rev for row in current if row.doc is not None}

        docs: list[JSONObject] = []
        for title_id, doc_id in zip(title_ids, doc_ids):
            doc: JSONObject = {
                "_id": doc_id,
                "rating": self.coerce(ratings[title_id]),
            }
            if revs.get(doc_id) is not None:
                doc["_rev"] = revs[doc_id]
            docs.append(doc)

        written = await call_store("set_ratings", lambda: self._store.bulk_docs(docs))
        results: dict[Key, Record] = {}
        for title_id, doc, outcome in zip(title_ids, docs, written):
            if outcome.ok:
                results[title_id] = Found(value=doc["rating"])
            else:
                results[title_id] = Failed(
                    message=outcome.reason or outcome.error or "Write failed",
                    code=outcome.error or "backend_error",
                )
        return results


def _rating_of(doc: JSONObject):
    return doc.get("rating")
