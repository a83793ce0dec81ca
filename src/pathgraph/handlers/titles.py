"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Title field handler.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence

from ..errors import InvalidArgumentError
from ..jsongraph.envelope import GraphEnvelope
from ..jsongraph.paths import as_pathset, integer_keys, keys_of
from ..jsongraph.values import KeySet
from ..records import Record
from ..types import Key, Path
from .base import HandlerContext, resolve_entity

TITLE_FIELDS = ("name", "year", "description", "boxshot", "rating")


class TitleFieldsHandler:
    """Serve ``titlesById[ids][fields]`` as a graph envelope."""

    route = "titlesById[{integers:titleIds}]['name','year','description','boxshot','rating']"

    def __init__(
        self,
        titles: Callable[[Iterable[Key]], Awaitable[Mapping[Key, Record]]],
        *,
        fields: Sequence[str] = TITLE_FIELDS,
        refs: Mapping[str, Path] | None = None,
    ) -> None:
        self._titles = titles
        self._fields = tuple(fields) + tuple(f for f in (refs or {}) if f not in fields)
        self._refs = dict(refs or {})

    async def get(
        self,
        ctx: HandlerContext,
        pathset: str | Sequence[KeySet],
    ) -> GraphEnvelope:
        _ = ctx
        parts = as_pathset(pathset)
        if len(parts) != 3 or parts[0] != "titlesById":
            raise InvalidArgumentError(f"Unsupported title path: {parts!r}")
        title_ids = integer_keys(parts[1])
        fields = keys_of(parts[2])
        unknown = [f for f in fields if f not in self._fields]
        if unknown:
            raise InvalidArgumentError(f"Unknown title fields: {unknown}")

        records = await self._titles(title_ids)
        envelope = GraphEnvelope()
        for title_id in dict.fromkeys(title_ids):
            for item in resolve_entity(
                ("titlesById", title_id),
                records.get(title_id),
                fields,
                refs=self._refs,
            ):
                envelope.add(item)
        return envelope
