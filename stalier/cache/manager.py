"""
Stale-while-revalidate orchestration over a pluggable async cache store.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Coroutine, Set, TypeVar

from .core import (
    CacheEntry,
    CacheStatus,
    Freshness,
    StalierPolicy,
    StalierResult,
    coerce_entry,
    now_ms,
)
from .freshness import classify
from .store import WarningLogger

T = TypeVar("T")

logger = logging.getLogger("stalier.cache")

# Strong references to detached work so the event loop cannot drop it mid-flight
_background_tasks: Set["asyncio.Task[None]"] = set()


def warn(log: WarningLogger, err: Exception, key: str) -> None:
    """Report a contained cache-layer failure."""
    if str(err):
        log.warning(f"Error updating cache for key {key}: {err}")
    else:
        log.warning(f"Error updating cache for key {key}")


def _spawn(coro: Coroutine[Any, Any, None]) -> None:
    """Run coro detached from the caller; its outcome is never observed."""
    task = asyncio.create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)


async def _set_cache(key: str, updated_count: int, value: Any, now: int, policy: StalierPolicy) -> None:
    """Write an entry; a failed write is logged and dropped."""
    entry = CacheEntry(value=value, last_updated=now, updated_count=updated_count)
    try:
        await policy.cache_store.set(key, entry)
    except Exception as e:
        warn(policy.logger, e, key)


async def _revalidate(
    producer: Callable[[], Awaitable[Any]],
    key: str,
    updated_count: int,
    policy: StalierPolicy,
) -> None:
    """
    Re-run the producer and store its result. Failures are logged and dropped.

    The new entry is stamped when the producer finishes, not with the time
    of the stale read that scheduled this task.
    """
    try:
        logger.debug(f"Background revalidation started: {key}")
        result = await producer()
    except Exception as e:
        warn(policy.logger, e, key)
        return
    await _set_cache(key, updated_count, result, now_ms(), policy)
    logger.debug(f"Background revalidation complete: {key}")


async def with_stale_while_revalidate(
    producer: Callable[[], Awaitable[T]],
    policy: StalierPolicy,
) -> StalierResult[T]:
    """
    Return the producer's result, served from cache when the policy allows.

    Example:
        result = await with_stale_while_revalidate(
            fetch_report,
            StalierPolicy(cache_store=redis_store, key="report", max_age=1,
                          stale_while_revalidate=999),
        )

    Args:
        producer: Zero-argument coroutine function doing the expensive work
        policy: Freshness windows, key, store and logger for this call

    Returns:
        StalierResult with the data and how it was obtained

    Raises:
        Whatever the producer raises when its result is being returned
        directly (MISS and NO_CACHE). Store failures never propagate.
    """
    if not policy.caching_enabled:
        return StalierResult(data=await producer(), status=CacheStatus.NO_CACHE)

    key = policy.key.resolve()
    updated_count = 0

    try:
        cached = coerce_entry(await policy.cache_store.get(key))
    except Exception as e:
        # A store that cannot be read behaves like an empty one
        warn(policy.logger, e, key)
        cached = None

    now = now_ms()
    freshness = classify(cached, policy.max_age, policy.stale_while_revalidate, now)

    if cached is not None:
        if freshness is Freshness.FRESH:
            logger.debug(f"CACHE HIT: {key} [age={cached.age_ms(now)}ms]")
            return StalierResult(data=cached.value, status=CacheStatus.HIT)

        updated_count = cached.updated_count + 1
        if freshness is Freshness.STALE:
            logger.debug(f"CACHE STALE (revalidating): {key} [age={cached.age_ms(now)}ms]")
            _spawn(_revalidate(producer, key, updated_count, policy))
            return StalierResult(data=cached.value, status=CacheStatus.STALE)

    logger.debug(f"CACHE MISS: {key}")
    result = await producer()
    _spawn(_set_cache(key, updated_count, result, now_ms(), policy))
    return StalierResult(data=result, status=CacheStatus.MISS)
