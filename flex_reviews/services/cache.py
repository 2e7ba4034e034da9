from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    value: T
    fetched_at: float

    def is_fresh(self, *, now: float, ttl_seconds: float) -> bool:
        return now - self.fetched_at < ttl_seconds


@dataclass(slots=True)
class _KeyLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    waiters: int = 0


class TTLCache(Generic[T]):
    """Process-wide keyed cache whose entries expire ``ttl_seconds`` after fetch."""

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._key_locks: dict[str, _KeyLock] = {}

    def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None or not entry.is_fresh(now=self._clock(), ttl_seconds=self.ttl_seconds):
            return None
        return entry.value

    def set(self, key: str, value: T) -> None:
        self._entries[key] = CacheEntry(value=value, fetched_at=self._clock())

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_fetch(
        self,
        key: str,
        fetch: Callable[[], Awaitable[T | None]],
    ) -> tuple[T | None, bool]:
        """Return ``(value, cache_hit)``; ``None`` results from ``fetch`` are not cached."""
        cached = self.get(key)
        if cached is not None:
            return cached, True

        key_lock = self._key_locks.get(key)
        if key_lock is None:
            key_lock = self._key_locks[key] = _KeyLock()
        key_lock.waiters += 1
        try:
            async with key_lock.lock:
                cached = self.get(key)
                if cached is not None:
                    return cached, True
                value = await fetch()
                if value is not None:
                    self.set(key, value)
                return value, False
        finally:
            key_lock.waiters -= 1
            # Locks only live while a fetch for their key is in flight.
            if key_lock.waiters == 0:
                del self._key_locks[key]
