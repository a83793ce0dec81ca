"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

User rating handler.

A rating record is a leaf: its key path is ``titlesById[id].userRating``, so
an unrated title yields a known-empty atom there without claiming the title
itself is absent. Backend failures attach to ``titlesById[id]``.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from ..errors import InvalidArgumentError
from ..jsongraph.envelope import GraphEnvelope
from ..jsongraph.paths import as_pathset, integer_keys
from ..jsongraph.values import Atom, KeySet, PathValue, undefined
from ..records import Found, NotFound, Record
from ..runtime.cache import ReadThroughCache
from ..services.ratings import RatingService
from ..types import JSONValue
from .auth import Authorizer, RequireIdentity, ensure_authorized
from .base import HandlerContext, resolve_leaf

logger = logging.getLogger("pathgraph.handlers.ratings")

_CANONICAL_INT = re.compile(r"-?(0|[1-9]\d*)")


class _RatingUpdate(BaseModel):
    title_id: int
    rating: float

    @field_validator("title_id", mode="before")
    @classmethod
    def _integer_title_id(cls, value: Any) -> int:
        if isinstance(value, str) and _CANONICAL_INT.fullmatch(value):
            return int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"title id must be an integer, got {value!r}")
        return value

    @field_validator("rating", mode="before")
    @classmethod
    def _numeric_rating(cls, value: Any) -> float:
        if isinstance(value, Atom):
            value = value.value
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"rating must be a number, got {value!r}")
        if not math.isfinite(value):
            raise ValueError("rating must be finite")
        return value


def _rating_path(title_id: int) -> tuple[str, int, str]:
    return ("titlesById", title_id, "userRating")


def _resolve_rating(title_id: int, record: Record | None) -> PathValue:
    # Failures belong to the title, not to the rating leaf.
    if isinstance(record, (Found, NotFound)):
        return resolve_leaf(_rating_path(title_id), record)
    return resolve_leaf(("titlesById", title_id), record)


class UserRatingHandler:
    """Serve and update ``titlesById[ids].userRating`` for the calling user."""

    route = "titlesById[{integers:titleIds}].userRating"

    def __init__(
        self,
        service: RatingService,
        ratings: ReadThroughCache,
        *,
        authorizer: Authorizer | None = None,
    ) -> None:
        self._service = service
        self._ratings = ratings
        self._authorizer: Authorizer = authorizer or RequireIdentity()

    async def get(
        self,
        ctx: HandlerContext,
        pathset: str | Sequence[KeySet],
    ) -> list[PathValue]:
        parts = as_pathset(pathset)
        if len(parts) != 3 or parts[0] != "titlesById" or parts[2] != "userRating":
            raise InvalidArgumentError(f"Unsupported rating path: {parts!r}")
        title_ids = list(dict.fromkeys(integer_keys(parts[1])))

        if not ctx.identity:
            # Anonymous callers have no ratings.
            return [
                PathValue(path=_rating_path(title_id), value=undefined())
                for title_id in title_ids
            ]

        doc_ids = {
            title_id: self._service.doc_id(ctx.identity, title_id) for title_id in title_ids
        }
        records = await self._ratings(list(doc_ids.values()))
        return [
            _resolve_rating(title_id, records.get(doc_ids[title_id]))
            for title_id in title_ids
        ]

    async def set(
        self,
        ctx: HandlerContext,
        envelope: GraphEnvelope | Mapping[str, JSONValue],
    ) -> list[PathValue]:
        """Write every ``titlesById[id].userRating`` value found in ``envelope``."""
        identity = ensure_authorized(self._authorizer, ctx.identity, action="set ratings")
        if not isinstance(envelope, GraphEnvelope):
            envelope = GraphEnvelope.from_json(envelope)

        updates = _parse_updates(envelope)
        if not updates:
            return []

        ratings = {update.title_id: update.rating for update in updates}
        records = await self._service.set_ratings(identity, ratings)
        await self._ratings.prime(
            {
                self._service.doc_id(identity, title_id): record
                for title_id, record in records.items()
            }
        )
        return [_resolve_rating(title_id, records.get(title_id)) for title_id in ratings]


def _parse_updates(envelope: GraphEnvelope) -> list[_RatingUpdate]:
    updates: list[_RatingUpdate] = []
    for item in envelope.flatten():
        path = item.path
        if len(path) != 3 or path[0] != "titlesById" or path[2] != "userRating":
            raise InvalidArgumentError(f"Unsupported rating path: {list(path)!r}")
        try:
            updates.append(_RatingUpdate(title_id=path[1], rating=item.value))
        except ValidationError as exc:
            raise InvalidArgumentError(str(exc)) from exc
    return updates
