"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Document store contract consumed by catalog services.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..errors import BackendError, NotFoundError
from ..types import JSONObject

NOT_FOUND_ERROR = "not_found"
CONFLICT_ERROR = "conflict"


class DocumentNotFoundError(NotFoundError):
    """Raised by ``DocumentStore.get`` for unknown document ids."""


class DocumentConflictError(BackendError):
    """Raised when a write carries a stale or missing revision."""


@dataclass(frozen=True, slots=True)
class DocumentRow:
    """
    One row of a keyed multi-document read.

    Exactly one of ``doc`` and ``error`` is set. ``error`` is
    ``"not_found"`` for unknown keys and a backend message otherwise.
    """

    key: str
    doc: JSONObject | None = None
    rev: str | None = None
    error: str | None = None


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Outcome of one document write in a bulk request."""

    id: str
    ok: bool
    rev: str | None = None
    error: str | None = None
    reason: str | None = None


@runtime_checkable
class DocumentStore(Protocol):
    """Revisioned document store used behind the catalog fetchers."""

    async def all_docs(self, keys: Sequence[str]) -> list[DocumentRow]:
        """Return one row per key, in key order."""
        ...

    async def get(self, doc_id: str) -> JSONObject:
        """Return one document or raise ``DocumentNotFoundError``."""
        ...

    async def put(self, doc: JSONObject) -> str:
        """Write one document and return its new revision."""
        ...

    async def bulk_docs(self, docs: Sequence[JSONObject]) -> list[WriteResult]:
        """Write many documents; failures are reported per row."""
        ...
