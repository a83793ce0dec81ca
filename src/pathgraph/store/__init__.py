"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Document store contract and the in-memory implementation.
"""

from .base import (
    CONFLICT_ERROR,
    NOT_FOUND_ERROR,
    DocumentConflictError,
    DocumentNotFoundError,
    DocumentRow,
    DocumentStore,
    WriteResult,
)
from .memory import InMemoryDocumentStore

__all__ = [
    "CONFLICT_ERROR",
    "NOT_FOUND_ERROR",
    "DocumentConflictError",
    "DocumentNotFoundError",
    "DocumentRow",
    "DocumentStore",
    "InMemoryDocumentStore",
    "WriteResult",
]
