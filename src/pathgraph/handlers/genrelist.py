"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Genre list handlers.

The genre list record for a caller lives at ``genrelist``. A genre index past
the end of the list resolves to ``Atom(None)`` at ``genrelist[i]``; a title
index past the end of a genre resolves to ``Atom(None)`` at
``genrelist[i].titles[j]``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictInt, ValidationError

from ..errors import InvalidArgumentError
from ..jsongraph.paths import as_pathset, integer_keys, keys_of
from ..jsongraph.values import (
    Invalidation,
    KeySet,
    PathValue,
    Range,
    Ref,
    undefined,
    value_from_json,
)
from ..records import Found, Record
from ..runtime.cache import ReadThroughCache
from ..services.recommendations import GenreListUpdate, RecommendationService
from ..store.base import DocumentNotFoundError
from .auth import Authorizer, RequireIdentity, ensure_authorized
from .base import HandlerContext, item_at, resolve_leaf, to_leaf

logger = logging.getLogger("pathgraph.handlers.genrelist")

_LIST_PATH = ("genrelist",)


class _GenreListHandler:
    def __init__(
        self,
        service: RecommendationService,
        lists: ReadThroughCache,
        *,
        authorizer: Authorizer | None = None,
    ) -> None:
        self._service = service
        self._lists = lists
        self._authorizer: Authorizer = authorizer or RequireIdentity()

    async def _load(self, ctx: HandlerContext) -> tuple[list[Any] | None, Record | None]:
        list_id = self._service.list_id_for(ctx.identity)
        records = await self._lists([list_id])
        record = records.get(list_id)
        if isinstance(record, Found):
            return list(record.value or []), record
        return None, record

    async def _refresh(self, update: GenreListUpdate) -> None:
        await self._lists.prime({update.list_id: Found(value=update.recommendations)})

    def _genre_index(self, call_path: Sequence[KeySet]) -> int:
        parts = as_pathset(call_path)
        if len(parts) != 4 or parts[0] != "genrelist" or parts[2] != "titles":
            raise InvalidArgumentError(f"Unsupported call path: {parts!r}")
        indices = integer_keys(parts[1])
        if len(indices) != 1:
            raise InvalidArgumentError("Call path must name exactly one genre")
        return indices[0]


class GenreNameHandler(_GenreListHandler):
    """Serve ``genrelist[indices].name``."""

    route = "genrelist[{integers:indices}]['name']"
    keys = ("name",)

    async def get(
        self,
        ctx: HandlerContext,
        pathset: str | Sequence[KeySet],
    ) -> list[PathValue]:
        parts = as_pathset(pathset)
        if len(parts) != 3 or parts[0] != "genrelist":
            raise InvalidArgumentError(f"Unsupported genre path: {parts!r}")
        indices = integer_keys(parts[1])
        keys = keys_of(parts[2])
        unknown = [key for key in keys if key not in self.keys]
        if unknown:
            raise InvalidArgumentError(f"Unknown genre keys: {unknown}")

        genres, record = await self._load(ctx)
        if genres is None:
            return [resolve_leaf(_LIST_PATH, record)]

        out: list[PathValue] = []
        for index in dict.fromkeys(indices):
            genre = item_at(genres, index)
            if genre is None:
                out.append(PathValue(path=("genrelist", index), value=undefined()))
                continue
            for key in keys:
                out.append(
                    PathValue(path=("genrelist", index, key), value=to_leaf(genre.get(key)))
                )
        return out


class GenreTitlesHandler(_GenreListHandler):
    """Serve ``genrelist[indices].titles[titleIndices]`` as title references."""

    route = "genrelist[{integers:indices}].titles[{integers:titleIndices}]"

    async def get(
        self,
        ctx: HandlerContext,
        pathset: str | Sequence[KeySet],
    ) -> list[PathValue]:
        parts = as_pathset(pathset)
        if len(parts) != 4 or parts[0] != "genrelist" or parts[2] != "titles":
            raise InvalidArgumentError(f"Unsupported genre titles path: {parts!r}")
        indices = integer_keys(parts[1])
        title_indices = list(dict.fromkeys(integer_keys(parts[3])))

        genres, record = await self._load(ctx)
        if genres is None:
            return [resolve_leaf(_LIST_PATH, record)]

        out: list[PathValue] = []
        for index in dict.fromkeys(indices):
            genre = item_at(genres, index)
            if genre is None:
                out.append(PathValue(path=("genrelist", index), value=undefined()))
                continue
            titles = genre.get("titles") or []
            for title_index in title_indices:
                path = ("genrelist", index, "titles", title_index)
                title_id = item_at(titles, title_index)
                if title_id is None:
                    out.append(PathValue(path=path, value=undefined()))
                else:
                    out.append(PathValue(path=path, value=Ref(path=("titlesById", title_id))))
        return out


class GenreLengthHandler(_GenreListHandler):
    """Serve ``genrelist[indices].titles.length``."""

    route = "genrelist[{integers:indices}].titles.length"

    async def get(
        self,
        ctx: HandlerContext,
        pathset: str | Sequence[KeySet],
    ) -> list[PathValue]:
        parts = as_pathset(pathset)
        if (
            len(parts) != 4
            or parts[0] != "genrelist"
            or parts[2] != "titles"
            or parts[3] != "length"
        ):
            raise InvalidArgumentError(f"Unsupported genre length path: {parts!r}")
        indices = integer_keys(parts[1])

        genres, record = await self._load(ctx)
        if genres is None:
            return [resolve_leaf(_LIST_PATH, record)]

        out: list[PathValue] = []
        for index in dict.fromkeys(indices):
            genre = item_at(genres, index)
            if genre is None:
                out.append(PathValue(path=("genrelist", index), value=undefined()))
            else:
                out.append(
                    PathValue(
                        path=("genrelist", index, "titles", "length"),
                        value=len(genre.get("titles") or []),
                    )
                )
        return out


class _PushArgs(BaseModel):
    entity: Literal["titlesById"]
    title_id: StrictInt


class _RemoveArgs(BaseModel):
    index: StrictInt = Field(ge=0)


class GenrePushHandler(_GenreListHandler):
    """Append a title reference to the caller's genre: ``genrelist[i].titles.push``."""

    route = "genrelist[{integers:indices}].titles.push"

    async def call(
        self,
        ctx: HandlerContext,
        call_path: str | Sequence[KeySet],
        args: Sequence[Any],
    ) -> list[PathValue]:
        identity = ensure_authorized(self._authorizer, ctx.identity, action="push titles")
        genre_index = self._genre_index(call_path)
        push = _parse_push_args(args)

        list_id = self._service.list_id_for(identity)
        try:
            update = await self._service.add_title(list_id, genre_index, push.title_id)
        except DocumentNotFoundError:
            return [PathValue(path=_LIST_PATH, value=undefined())]
        await self._refresh(update)

        titles_path = ("genrelist", genre_index, "titles")
        return [
            PathValue(
                path=titles_path + (update.new_length - 1,),
                value=Ref(path=("titlesById", push.title_id)),
            ),
            PathValue(path=titles_path + ("length",), value=update.new_length),
        ]


class GenreRemoveHandler(_GenreListHandler):
    """Remove one title from the caller's genre: ``genrelist[i].titles.remove``."""

    route = "genrelist[{integers:indices}].titles.remove"

    async def call(
        self,
        ctx: HandlerContext,
        call_path: str | Sequence[KeySet],
        args: Sequence[Any],
    ) -> list[PathValue | Invalidation]:
        identity = ensure_authorized(self._authorizer, ctx.identity, action="remove titles")
        genre_index = self._genre_index(call_path)
        if len(args) != 1:
            raise InvalidArgumentError("remove expects exactly one title index")
        try:
            remove = _RemoveArgs(index=args[0])
        except ValidationError as exc:
            raise InvalidArgumentError(str(exc)) from exc

        list_id = self._service.list_id_for(identity)
        try:
            update = await self._service.remove_title(list_id, genre_index, remove.index)
        except DocumentNotFoundError:
            return [PathValue(path=_LIST_PATH, value=undefined())]
        await self._refresh(update)

        titles_path = ("genrelist", genre_index, "titles")
        return [
            PathValue(path=titles_path + ("length",), value=update.new_length),
            Invalidation(
                path=titles_path + (Range(remove.index, update.old_length - 1),),
                reason="shifted",
            ),
        ]


def _parse_push_args(args: Sequence[Any]) -> _PushArgs:
    if len(args) != 1:
        raise InvalidArgumentError("push expects exactly one title reference")
    raw = args[0]
    if isinstance(raw, dict):
        try:
            raw = value_from_json(raw)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc
    if not isinstance(raw, Ref) or len(raw.path) != 2:
        raise InvalidArgumentError("push expects a reference to titlesById[<id>]")
    try:
        return _PushArgs(entity=raw.path[0], title_id=raw.path[1])
    except ValidationError as exc:
        raise InvalidArgumentError(str(exc)) from exc
