"""
Freshness classification for cache entries.
"""
from typing import Optional

from .core import CacheEntry, Freshness


def is_fresh(entry: CacheEntry, max_age: int, now: int) -> bool:
    """Check if the entry is within its max-age."""
    return entry.age_ms(now) < max_age * 1000


def is_usable_stale(entry: CacheEntry, max_age: int, stale_while_revalidate: int, now: int) -> bool:
    """Check if the entry can still be served while it is revalidated."""
    return entry.age_ms(now) < (max_age + stale_while_revalidate) * 1000


def classify(
    entry: Optional[CacheEntry],
    max_age: int,
    stale_while_revalidate: int,
    now: int,
) -> Freshness:
    """
    Classify an entry against a freshness policy.

    Args:
        entry: Cached entry, or None when nothing is stored
        max_age: Seconds the entry counts as fresh
        stale_while_revalidate: Extra seconds it may be served stale
        now: Current time in milliseconds

    Returns:
        FRESH, STALE or EXPIRED. Both windows are half-open, so an entry
        exactly max_age old is already stale.
    """
    if entry is None:
        return Freshness.EXPIRED
    if is_fresh(entry, max_age, now):
        return Freshness.FRESH
    if is_usable_stale(entry, max_age, stale_while_revalidate, now):
        return Freshness.STALE
    return Freshness.EXPIRED
