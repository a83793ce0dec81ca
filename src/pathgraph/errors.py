"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Error taxonomy shared by combinators, services, and handlers.

Per-key failures (``NotFound``, ``BackendError``) travel as records and end up
as path values. Only whole-call failures are raised out of handlers.
"""

from __future__ import annotations


class PathGraphError(Exception):
    """Base error for all pathgraph failures."""


class BackendError(PathGraphError):
    """Raised when a fetcher or document store fails for a whole batch."""


class NotFoundError(PathGraphError):
    """Raised when a single document lookup finds nothing."""


class UnauthorizedError(PathGraphError, PermissionError):
    """Raised when a mutation is attempted without an authorized identity."""


class InvalidArgumentError(PathGraphError, ValueError):
    """Raised for malformed paths or call arguments."""


class CacheBackendError(PathGraphError):
    """Raised when record cache backend resolution fails."""
