"""
Capabilities the stale-while-revalidate engine consumes from its caller.

Any object with matching methods works; nothing needs to subclass these.
"""
from typing import TYPE_CHECKING, Any, Mapping, Optional, Protocol, Union

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .core import CacheEntry


class CacheStore(Protocol):
    """
    Async key/value store holding cache entries.

    get returns None when nothing is stored under the key. It may return
    the entry itself or its wire form (see CacheEntry.to_dict). Both
    methods are allowed to raise; the engine contains those failures.
    """

    async def get(self, key: str) -> Optional[Union["CacheEntry", Mapping[str, Any]]]:
        ...

    async def set(self, key: str, entry: "CacheEntry") -> None:
        ...


class WarningLogger(Protocol):
    """Narrow logging sink. A stdlib logging.Logger satisfies it."""

    def warning(self, msg: str) -> None:
        ...
