"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Catalog services: fetchers and mutations over the document stores.
"""

from .base import call_store, row_to_record, rows_to_records, strip_meta
from .ratings import RatingService
from .recommendations import GenreListUpdate, RecommendationService
from .titles import TitleService

__all__ = [
    "GenreListUpdate",
    "RatingService",
    "RecommendationService",
    "TitleService",
    "call_store",
    "row_to_record",
    "rows_to_records",
    "strip_meta",
]
