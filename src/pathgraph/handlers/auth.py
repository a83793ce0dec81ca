"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Authorization predicates evaluated by mutation handlers.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Protocol

from ..errors import UnauthorizedError

logger = logging.getLogger("pathgraph.handlers.auth")


class Authorizer(Protocol):
    """Capability predicate over the caller's identity."""

    def is_authorized(self, identity: str | None) -> bool: ...


class RequireIdentity:
    """Allow any caller that carries a non-empty identity."""

    def is_authorized(self, identity: str | None) -> bool:
        return bool(identity and str(identity).strip())


class AllowListAuthorizer:
    """Allow only the listed identities."""

    def __init__(self, identities: Iterable[str]) -> None:
        self._identities = frozenset(str(identity) for identity in identities)

    def is_authorized(self, identity: str | None) -> bool:
        return identity is not None and str(identity) in self._identities


class AllowAllAuthorizer:
    """Development-only authorizer that allows every caller."""

    def is_authorized(self, identity: str | None) -> bool:
        _ = identity
        return True


def ensure_authorized(
    authorizer: Authorizer,
    identity: str | None,
    *,
    action: str,
) -> str:
    """Return the identity or raise ``UnauthorizedError`` before any side effect."""
    if not authorizer.is_authorized(identity):
        logger.warning("Rejected %s for identity %r", action, identity)
        raise UnauthorizedError(f"Not authorized to {action}")
    return str(identity) if identity is not None else ""
