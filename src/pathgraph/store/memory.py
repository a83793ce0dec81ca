"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

In-memory document store implementation.
"""

from __future__ import annotations

import copy
import hashlib
import json
import logging
from collections.abc import Iterable, Sequence

from ..errors import BackendError
from ..types import JSONObject
from .base import (
    CONFLICT_ERROR,
    NOT_FOUND_ERROR,
    DocumentConflictError,
    DocumentNotFoundError,
    DocumentRow,
    DocumentStore,
    WriteResult,
)

logger = logging.getLogger("pathgraph.store.memory")


class InMemoryDocumentStore(DocumentStore):
    """
    In-process revisioned document store.

    Suitable for tests and demos. Documents are deep-copied on the way in and
    out so callers never share state with the store. Revisions follow the
    ``"<generation>-<digest>"`` shape; a write must carry the current
    revision of an existing document.
    """

    def __init__(self, docs: Iterable[JSONObject] | None = None) -> None:
        self._docs: dict[str, JSONObject] = {}
        self._errors: dict[str, str] = {}
        self.reads = 0
        self.writes = 0
        for doc in docs or ():
            self.load(doc)

    def load(self, doc: JSONObject) -> str:
        """Insert or replace a document without revision checks."""
        doc_id = str(doc["_id"])
        current = self._docs.get(doc_id)
        rev = self._next_rev(current, doc)
        stored = copy.deepcopy(doc)
        stored["_id"] = doc_id
        stored["_rev"] = rev
        self._docs[doc_id] = stored
        return rev

    def inject_error(self, doc_id: str, message: str) -> None:
        """Make reads and writes of ``doc_id`` fail with ``message``."""
        self._errors[doc_id] = message

    def clear_errors(self) -> None:
        self._errors.clear()

    def peek(self, doc_id: str) -> JSONObject | None:
        """Return a copy of a stored document without counting a read."""
        doc = self._docs.get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def all_docs(self, keys: Sequence[str]) -> list[DocumentRow]:
        self.reads += 1
        rows: list[DocumentRow] = []
        for key in keys:
            message = self._errors.get(key)
            if message is not None:
                rows.append(DocumentRow(key=key, error=message))
                continue
            doc = self._docs.get(key)
            if doc is None:
                rows.append(DocumentRow(key=key, error=NOT_FOUND_ERROR))
                continue
            rows.append(DocumentRow(key=key, doc=copy.deepcopy(doc), rev=doc["_rev"]))
        return rows

    async def get(self, doc_id: str) -> JSONObject:
        self.reads += 1
        message = self._errors.get(doc_id)
        if message is not None:
            raise BackendError(message)
        doc = self._docs.get(doc_id)
        if doc is None:
            raise DocumentNotFoundError(f"Document '{doc_id}' not found")
        return copy.deepcopy(doc)

    async def put(self, doc: JSONObject) -> str:
        result = self._write(doc)
        if not result.ok:
            if result.error == CONFLICT_ERROR:
                raise DocumentConflictError(result.reason or f"Conflict writing '{result.id}'")
            raise BackendError(result.reason or f"Failed writing '{result.id}'")
        return result.rev or ""

    async def bulk_docs(self, docs: Sequence[JSONObject]) -> list[WriteResult]:
        return [self._write(doc) for doc in docs]

    def _write(self, doc: JSONObject) -> WriteResult:
        doc_id = str(doc["_id"])
        message = self._errors.get(doc_id)
        if message is not None:
            return WriteResult(id=doc_id, ok=False, error=message, reason=message)

        current = self._docs.get(doc_id)
        current_rev = current["_rev"] if current is not None else None
        if doc.get("_rev") != current_rev:
            logger.debug("Rejecting write of '%s' with stale revision", doc_id)
            return WriteResult(
                id=doc_id,
                ok=False,
                error=CONFLICT_ERROR,
                reason="Document update conflict",
            )

        self.writes += 1
        rev = self.load(doc)
        return WriteResult(id=doc_id, ok=True, rev=rev)

    def _next_rev(self, current: JSONObject | None, doc: JSONObject) -> str:
        generation = 1
        if current is not None:
            generation = int(str(current["_rev"]).split("-", 1)[0]) + 1
        body = {k: v for k, v in doc.items() if k not in ("_id", "_rev")}
        digest = hashlib.md5(
            json.dumps(body, sort_keys=True, default=str).encode("utf-8")
        ).hexdigest()
        return f"{generation}-{digest}"
