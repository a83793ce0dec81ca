"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Catalog composition root.

Builds the services, one fetch pipeline per backend resource (titles, genre
lists, and ratings keyed by ``"<user>,<title>"`` document id), and the route
handlers that read through them.
A router registers ``Catalog.handlers`` by their ``route`` and mixes their
outputs with ``assemble``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from ..factory import build_pipeline, create_redis_client
from ..metrics import PipelineMetrics
from ..runtime.cache import ReadThroughCache
from ..services.ratings import RatingService
from ..services.recommendations import RecommendationService
from ..services.titles import TitleService
from ..settings import PathGraphSettings
from ..store.base import DocumentStore
from ..store.memory import InMemoryDocumentStore
from ..types import JSONObject, Path
from .auth import Authorizer, RequireIdentity
from .base import HandlerContext, RouteHandler
from .genrelist import (
    GenreLengthHandler,
    GenreNameHandler,
    GenrePushHandler,
    GenreRemoveHandler,
    GenreTitlesHandler,
)
from .ratings import UserRatingHandler
from .titles import TitleFieldsHandler

logger = logging.getLogger("pathgraph.handlers.catalog")


class Catalog:
    """Wire stores, pipelines, and handlers for the title catalog graph."""

    def __init__(
        self,
        titles_store: DocumentStore,
        ratings_store: DocumentStore,
        lists_store: DocumentStore,
        *,
        settings: PathGraphSettings | None = None,
        authorizer: Authorizer | None = None,
        title_refs: Mapping[str, Path] | None = None,
        redis_client: Any | None = None,
        metrics: PipelineMetrics | None = None,
    ) -> None:
        self.settings = settings or PathGraphSettings()
        self._authorizer: Authorizer = authorizer or RequireIdentity()
        self._metrics = metrics
        if redis_client is None and self.settings.cache_backend == "redis":
            redis_client = create_redis_client(self.settings)
        self._redis_client = redis_client

        self.titles = TitleService(titles_store)
        self.ratings = RatingService(
            ratings_store,
            rating_min=self.settings.rating_min,
            rating_max=self.settings.rating_max,
        )
        self.recommendations = RecommendationService(
            lists_store,
            default_list_id=self.settings.default_list_id,
        )

        self.title_pipeline = self._pipeline(self.titles.get_titles, "titles")
        self.list_pipeline = self._pipeline(
            self.recommendations.get_genre_lists, "genrelists"
        )
        self.rating_pipeline = self._pipeline(self.ratings.get_rating_docs, "ratings")

        self.title_fields = TitleFieldsHandler(self.title_pipeline, refs=title_refs)
        self.user_rating = UserRatingHandler(
            self.ratings, self.rating_pipeline, authorizer=self._authorizer
        )
        self.genre_names = GenreNameHandler(
            self.recommendations, self.list_pipeline, authorizer=self._authorizer
        )
        self.genre_titles = GenreTitlesHandler(
            self.recommendations, self.list_pipeline, authorizer=self._authorizer
        )
        self.genre_length = GenreLengthHandler(
            self.recommendations, self.list_pipeline, authorizer=self._authorizer
        )
        self.genre_push = GenrePushHandler(
            self.recommendations, self.list_pipeline, authorizer=self._authorizer
        )
        self.genre_remove = GenreRemoveHandler(
            self.recommendations, self.list_pipeline, authorizer=self._authorizer
        )
        logger.debug(
            "Catalog ready (cache backend=%s, coalescing=%s)",
            self.settings.cache_backend,
            self.settings.coalescing_enabled,
        )

    @classmethod
    def in_memory(
        cls,
        *,
        titles: Iterable[JSONObject] = (),
        ratings: Iterable[JSONObject] = (),
        lists: Iterable[JSONObject] = (),
        **kwargs: Any,
    ) -> Catalog:
        """Build a catalog over three seeded in-memory document stores."""
        return cls(
            InMemoryDocumentStore(titles),
            InMemoryDocumentStore(ratings),
            InMemoryDocumentStore(lists),
            **kwargs,
        )

    @property
    def handlers(self) -> list[RouteHandler]:
        return [
            self.title_fields,
            self.user_rating,
            self.genre_names,
            self.genre_titles,
            self.genre_length,
            self.genre_push,
            self.genre_remove,
        ]

    def context(self, identity: str | None = None, **kwargs: Any) -> HandlerContext:
        return HandlerContext(identity=identity, **kwargs)

    def _pipeline(self, fetcher, namespace: str) -> ReadThroughCache:
        return build_pipeline(
            fetcher,
            namespace=namespace,
            settings=self.settings,
            redis_client=self._redis_client,
            metrics=self._metrics,
        )
