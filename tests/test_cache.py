from __future__ import annotations

import asyncio

from flex_reviews.services.cache import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_get_or_fetch_caches_until_ttl_expires() -> None:
    clock = FakeClock()
    cache: TTLCache[list[str]] = TTLCache(60, clock=clock)
    calls: list[int] = []

    async def fetch() -> list[str]:
        calls.append(1)
        return [f"value-{len(calls)}"]

    async def run() -> list[tuple[list[str] | None, bool]]:
        results = [await cache.get_or_fetch("place-1", fetch)]
        clock.now += 59
        results.append(await cache.get_or_fetch("place-1", fetch))
        clock.now += 1
        results.append(await cache.get_or_fetch("place-1", fetch))
        return results

    results = asyncio.run(run())
    assert results == [(["value-1"], False), (["value-1"], True), (["value-2"], False)]
    assert len(calls) == 2


def test_none_results_are_not_cached() -> None:
    cache: TTLCache[str] = TTLCache(60)
    calls: list[int] = []

    async def fetch() -> str | None:
        calls.append(1)
        return None

    async def run() -> None:
        await cache.get_or_fetch("key", fetch)
        await cache.get_or_fetch("key", fetch)

    asyncio.run(run())
    assert len(calls) == 2
    assert cache.get("key") is None


def test_concurrent_misses_fetch_once() -> None:
    cache: TTLCache[str] = TTLCache(60)
    calls: list[int] = []

    async def fetch() -> str:
        calls.append(1)
        await asyncio.sleep(0.01)
        return "shared"

    async def run() -> list[tuple[str | None, bool]]:
        return await asyncio.gather(*(cache.get_or_fetch("key", fetch) for _ in range(5)))

    results = asyncio.run(run())
    assert len(calls) == 1
    assert [value for value, _ in results] == ["shared"] * 5
    assert sum(1 for _, hit in results if not hit) == 1


def test_invalidate_and_clear_drop_entries() -> None:
    cache: TTLCache[str] = TTLCache(60)
    cache.set("a", "1")
    cache.set("b", "2")

    cache.invalidate("a")
    assert cache.get("a") is None
    assert cache.get("b") == "2"

    cache.clear()
    assert cache.get("b") is None


def test_key_locks_are_released_after_fetch() -> None:
    cache: TTLCache[str] = TTLCache(60)

    async def fetch() -> str:
        await asyncio.sleep(0)
        return "value"

    async def run() -> None:
        await asyncio.gather(*(cache.get_or_fetch(f"place-{index % 3}", fetch) for index in range(9)))
        await cache.get_or_fetch("missing", lambda: asyncio.sleep(0))

    asyncio.run(run())
    assert cache._key_locks == {}
    assert cache.get("place-2") == "value"
