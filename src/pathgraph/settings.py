"""
MIT License
Copyright (c) 2026 arpan404
See LICENSE file for full license text.

Pipeline and catalog settings with explicit environment loading.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .runtime.contracts import CachePolicy, CoalescingPolicy

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _env_first(*names: str, default: str | None = None) -> str | None:
    """
    Return the first non-empty environment variable in `names`.

    Args:
        *names: Environment variable names to check in order.
        default: Value returned if no non-empty variable is found.
    """
    for name in names:
        raw = os.getenv(name)
        if raw is None:
            continue
        value = raw.strip()
        if value:
            return value
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = _env_first(name)
    if raw is None:
        return default
    lowered = raw.lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Invalid boolean for {name}: {raw}")


@dataclass(frozen=True, slots=True)
class PathGraphSettings:
    """Explicit settings used by fetch pipelines and catalog services."""

    cache_backend: str = "inmemory"
    cache_negative_results: bool = False
    cache_ttl_s: float | None = None
    coalescing_enabled: bool = True

    redis_url: str | None = None
    redis_prefix: str = "pathgraph:cache"

    rating_min: float = 1
    rating_max: float = 5
    default_list_id: str = "all"

    def __post_init__(self) -> None:
        if self.rating_min > self.rating_max:
            raise ValueError("rating_min must be <= rating_max")
        if self.cache_ttl_s is not None and self.cache_ttl_s <= 0:
            raise ValueError("cache_ttl_s must be > 0 when set")

    @property
    def cache_policy(self) -> CachePolicy:
        return CachePolicy(
            cache_negative_results=self.cache_negative_results,
            ttl_s=self.cache_ttl_s,
        )

    @property
    def coalescing_policy(self) -> CoalescingPolicy:
        return CoalescingPolicy(enabled=self.coalescing_enabled)

    @staticmethod
    def from_env() -> "PathGraphSettings":
        """Load settings from `PATHGRAPH_*` environment variables."""
        ttl = _env_first("PATHGRAPH_CACHE_TTL_S")
        url = _env_first("PATHGRAPH_REDIS_URL", "REDIS_URL")
        if url is None and _env_first("PATHGRAPH_REDIS_HOST") is not None:
            host = _env_first("PATHGRAPH_REDIS_HOST", default="localhost")
            port = _env_first("PATHGRAPH_REDIS_PORT", default="6379")
            db = _env_first("PATHGRAPH_REDIS_DB", default="0")
            password = _env_first("PATHGRAPH_REDIS_PASSWORD", default="")
            if password:
                url = f"redis://:{password}@{host}:{port}/{db}"
            else:
                url = f"redis://{host}:{port}/{db}"

        return PathGraphSettings(
            cache_backend=(
                _env_first("PATHGRAPH_CACHE_BACKEND", default="inmemory") or "inmemory"
            ).lower(),
            cache_negative_results=_env_bool("PATHGRAPH_CACHE_NEGATIVE_RESULTS", False),
            cache_ttl_s=float(ttl) if ttl is not None else None,
            coalescing_enabled=_env_bool("PATHGRAPH_COALESCING_ENABLED", True),
            redis_url=url,
            redis_prefix=_env_first("PATHGRAPH_REDIS_PREFIX", default="pathgraph:cache")
            or "pathgraph:cache",
            rating_min=float(_env_first("PATHGRAPH_RATING_MIN", default="1") or "1"),
            rating_max=float(_env_first("PATHGRAPH_RATING_MAX", default="5") or "5"),
            default_list_id=_env_first("PATHGRAPH_DEFAULT_LIST_ID", default="all")
            or "all",
        )
