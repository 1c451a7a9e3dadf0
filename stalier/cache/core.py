"""
Core cache data structures.
"""
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Generic, Mapping, Optional, TypeVar, Union

from .store import CacheStore, WarningLogger

T = TypeVar("T")

logger = logging.getLogger("stalier.cache")


class CacheStatus(str, Enum):
    """What a caller got back from a stale-while-revalidate call."""
    HIT = "HIT"             # Served from cache within max-age
    MISS = "MISS"           # Producer ran, result returned and stored
    STALE = "STALE"         # Served from cache, revalidating in background
    NO_CACHE = "NO_CACHE"   # Caching disabled for this call


class Freshness(Enum):
    """Freshness of a cache entry at a point in time."""
    FRESH = "fresh"       # Within max-age
    STALE = "stale"       # Past max-age but within the stale window
    EXPIRED = "expired"   # Absent or older than max-age + stale window


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass
class CacheEntry:
    """
    Represents a cached value with the metadata needed for freshness checks.

    The entry belongs to the cache store; this package only builds it
    right before a write and reads it right after a get.
    """
    value: Any
    last_updated: int  # milliseconds since epoch
    updated_count: int = 0

    def age_ms(self, now: int) -> int:
        """Milliseconds elapsed since the entry was written."""
        return now - self.last_updated

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire form used by serializing stores."""
        return {
            "value": self.value,
            "lastUpdated": self.last_updated,
            "updatedCount": self.updated_count,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CacheEntry":
        """Build an entry from its wire form."""
        return cls(
            value=data["value"],
            last_updated=int(data["lastUpdated"]),
            updated_count=int(data.get("updatedCount", 0)),
        )


@dataclass(frozen=True)
class LiteralKey:
    """A cache key known up front."""
    value: str

    def resolve(self) -> str:
        return self.value


@dataclass(frozen=True)
class LazyKey:
    """A cache key built on demand, only when the cache is consulted."""
    factory: Callable[[], str]

    def resolve(self) -> str:
        return self.factory()


CacheKey = Union[LiteralKey, LazyKey]


@dataclass
class StalierPolicy:
    """
    Freshness policy and collaborators for one stale-while-revalidate call.

    max_age and stale_while_revalidate are in seconds. Leaving both at 0
    disables caching: the producer runs and the store is never touched.

    logger only needs a warning(msg) method, so a stdlib logging.Logger
    fits as is. A sink that exposes warn(msg) instead needs a thin wrapper.
    """
    cache_store: CacheStore
    key: Union[CacheKey, str]
    max_age: int = 0
    stale_while_revalidate: int = 0
    logger: WarningLogger = field(default=logger)

    def __post_init__(self):
        if self.max_age < 0:
            raise ValueError(f"max_age must be >= 0, got {self.max_age}")
        if self.stale_while_revalidate < 0:
            raise ValueError(
                f"stale_while_revalidate must be >= 0, got {self.stale_while_revalidate}"
            )
        if isinstance(self.key, str):
            self.key = LiteralKey(self.key)

    @property
    def caching_enabled(self) -> bool:
        return bool(self.max_age or self.stale_while_revalidate)


@dataclass
class StalierResult(Generic[T]):
    """The value handed back to the caller, tagged with how it was obtained."""
    data: T
    status: CacheStatus


def coerce_entry(cached: Optional[Union[CacheEntry, Mapping[str, Any]]]) -> Optional[CacheEntry]:
    """Accept either an entry or its wire form from a store."""
    if cached is None or isinstance(cached, CacheEntry):
        return cached
    return CacheEntry.from_dict(cached)
