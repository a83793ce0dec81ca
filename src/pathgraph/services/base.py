"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Row-to-record conversion shared by the catalog services.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, TypeVar

from ..errors import BackendError, PathGraphError
from ..records import NOT_FOUND, Failed, Found, Record
from ..store.base import NOT_FOUND_ERROR, DocumentRow
from ..types import JSONObject, Key

T = TypeVar("T")


def strip_meta(doc: JSONObject) -> JSONObject:
    """Drop store bookkeeping fields from a document."""
    return {k: v for k, v in doc.items() if k not in ("_id", "_rev")}


def row_to_record(
    row: DocumentRow | None,
    *,
    value: Callable[[JSONObject], Any] = strip_meta,
) -> Record:
    """Decide the record variant for one store row."""
    if row is None:
        return Failed(message="Store returned no row", code="missing")
    if row.error == NOT_FOUND_ERROR:
        return NOT_FOUND
    if row.error is not None or row.doc is None:
        return Failed(message=row.error or "Empty document row")
    return Found(value=value(row.doc))


def rows_to_records(
    keys: Sequence[Key],
    doc_ids: Sequence[str],
    rows: Sequence[DocumentRow],
    *,
    value: Callable[[JSONObject], Any] = strip_meta,
) -> dict[Key, Record]:
    """Map store rows back to the caller's keys by document id."""
    by_id: Mapping[str, DocumentRow] = {row.key: row for row in rows}
    return {
        key: row_to_record(by_id.get(doc_id), value=value)
        for key, doc_id in zip(keys, doc_ids)
    }


async def call_store(operation: str, fn: Callable[[], Awaitable[T]]) -> T:
    """Run one store call, surfacing foreign failures as ``BackendError``."""
    try:
        return await fn()
    except PathGraphError:
        raise
    except Exception as exc:
        raise BackendError(f"{operation} failed: {exc}") from exc
