"""
Stale-while-revalidate caching over a pluggable async store.
"""
from .core import (
    CacheEntry,
    CacheKey,
    CacheStatus,
    Freshness,
    LazyKey,
    LiteralKey,
    StalierPolicy,
    StalierResult,
)
from .store import CacheStore, WarningLogger
from .freshness import classify, is_fresh, is_usable_stale
from .manager import with_stale_while_revalidate

__all__ = [
    # Core types
    "CacheEntry",
    "CacheKey",
    "CacheStatus",
    "Freshness",
    "LazyKey",
    "LiteralKey",
    "StalierPolicy",
    "StalierResult",
    # Capabilities
    "CacheStore",
    "WarningLogger",
    # Freshness
    "classify",
    "is_fresh",
    "is_usable_stale",
    # Orchestration
    "with_stale_while_revalidate",
]
