"""
Shared fixtures: an in-memory fake store, a recording logger and producers.
"""
import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest

from stalier.cache import CacheEntry


class FakeStore:
    """Dict-backed cache store that records calls and can be told to fail."""

    def __init__(
        self,
        entries: Optional[Dict[str, Any]] = None,
        get_error: Optional[Exception] = None,
        set_error: Optional[Exception] = None,
    ):
        self.entries: Dict[str, Any] = dict(entries or {})
        self.get_error = get_error
        self.set_error = set_error
        self.get_calls: List[str] = []
        self.set_calls: List[Tuple[str, CacheEntry]] = []

    async def get(self, key: str):
        self.get_calls.append(key)
        await asyncio.sleep(0)
        if self.get_error:
            raise self.get_error
        return self.entries.get(key)

    async def set(self, key: str, entry: CacheEntry) -> None:
        self.set_calls.append((key, entry))
        await asyncio.sleep(0)
        if self.set_error:
            raise self.set_error
        self.entries[key] = entry


class RecordingLogger:
    """Collects warnings instead of emitting them."""

    def __init__(self):
        self.messages: List[str] = []

    def warning(self, msg: str) -> None:
        self.messages.append(msg)


class CountingProducer:
    """Async producer returning a fixed value (or raising) and counting calls."""

    def __init__(self, value: Any = "freshValue", error: Optional[Exception] = None):
        self.value = value
        self.error = error
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        await asyncio.sleep(0)
        if self.error:
            raise self.error
        return self.value


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def producer():
    return CountingProducer()


@pytest.fixture
def wait_for():
    """Poll until a condition holds, letting background tasks run."""

    async def _wait_for(predicate, timeout: float = 1.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not predicate():
            if loop.time() > deadline:
                raise AssertionError("Condition not met before timeout")
            await asyncio.sleep(0.01)

    return _wait_for
