"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Title lookups backed by the titles document store.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..records import Record
from ..store.base import DocumentStore
from ..types import Key
from .base import call_store, rows_to_records

logger = logging.getLogger("pathgraph.services.titles")


class TitleService:
    """Batch fetcher for title documents keyed by title id."""

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    async def get_titles(self, title_ids: Sequence[Key]) -> dict[Key, Record]:
        logger.debug("get_titles(%s)", list(title_ids))
        doc_ids = [str(title_id) for title_id in title_ids]
        rows = await call_store("get_titles", lambda: self._store.all_docs(doc_ids))
        return rows_to_records(title_ids, doc_ids, rows)
