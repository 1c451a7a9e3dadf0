"""
Stalier - stale-while-revalidate caching for async producers.
"""
from stalier.cache import (
    CacheEntry,
    CacheStatus,
    CacheStore,
    LazyKey,
    LiteralKey,
    StalierPolicy,
    StalierResult,
    with_stale_while_revalidate,
)

__version__ = "0.1.0"

__all__ = [
    "CacheEntry",
    "CacheStatus",
    "CacheStore",
    "LazyKey",
    "LiteralKey",
    "StalierPolicy",
    "StalierResult",
    "with_stale_while_revalidate",
]
