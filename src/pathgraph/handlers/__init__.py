"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Route handlers for the catalog graph and their resolution policy.
"""

from .auth import (
    AllowAllAuthorizer,
    AllowListAuthorizer,
    Authorizer,
    RequireIdentity,
    ensure_authorized,
)
from .base import (
    HandlerContext,
    RouteHandler,
    item_at,
    resolve_entity,
    resolve_leaf,
    to_leaf,
)
from .catalog import Catalog
from .genrelist import (
    GenreLengthHandler,
    GenreNameHandler,
    GenrePushHandler,
    GenreRemoveHandler,
    GenreTitlesHandler,
)
from .ratings import UserRatingHandler
from .titles import TITLE_FIELDS, TitleFieldsHandler

__all__ = [
    "AllowAllAuthorizer",
    "AllowListAuthorizer",
    "Authorizer",
    "Catalog",
    "GenreLengthHandler",
    "GenreNameHandler",
    "GenrePushHandler",
    "GenreRemoveHandler",
    "GenreTitlesHandler",
    "HandlerContext",
    "RequireIdentity",
    "RouteHandler",
    "TITLE_FIELDS",
    "TitleFieldsHandler",
    "UserRatingHandler",
    "ensure_authorized",
    "item_at",
    "resolve_entity",
    "resolve_leaf",
    "to_leaf",
]
