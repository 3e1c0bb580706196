"""Unit tests for TTLCache."""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from orbit.tasks.models import ListResult
from orbit.tasks.runtime import TTLCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestTTLCacheBasics:
    """Test get/set and expiry."""

    def test_set_and_get(self):
        cache = TTLCache(60.0)
        cache.set("projects:workspace:ws1", [{"id": "p1"}])
        assert cache.get("projects:workspace:ws1") == [{"id": "p1"}]
        assert "projects:workspace:ws1" in cache
        assert len(cache) == 1

    def test_missing_key(self):
        cache = TTLCache(60.0)
        assert cache.get("nope") is None
        assert "nope" not in cache

    def test_entry_expires(self):
        clock = FakeClock()
        cache = TTLCache(60.0, clock=clock)
        cache.set("k", [1])

        clock.advance(59.9)
        assert cache.get("k") == [1]

        clock.advance(0.2)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_per_entry_ttl(self):
        clock = FakeClock()
        cache = TTLCache(60.0, clock=clock)
        cache.set("short", [1], ttl=5.0)
        cache.set("long", [2])

        clock.advance(10.0)
        assert cache.get("short") is None
        assert cache.get("long") == [2]

    def test_rejects_list_result(self):
        cache = TTLCache(60.0)
        with pytest.raises(TypeError):
            cache.set("k", ListResult.complete([1, 2]))

    def test_rejects_non_positive_ttl(self):
        cache = TTLCache(60.0)
        with pytest.raises(ValueError):
            cache.set("k", [1], ttl=0)
        with pytest.raises(ValueError):
            TTLCache(0)

    def test_lru_eviction(self):
        cache = TTLCache(60.0, max_size=2)
        cache.set("a", [1])
        cache.set("b", [2])
        assert cache.get("a") == [1]  # a is now most recently used

        cache.set("c", [3])
        assert "b" not in cache
        assert "a" in cache
        assert "c" in cache

    def test_cleanup_removes_expired(self):
        clock = FakeClock()
        cache = TTLCache(60.0, clock=clock)
        cache.set("a", [1], ttl=1.0)
        cache.set("b", [2], ttl=100.0)

        clock.advance(2.0)
        assert cache.cleanup() == 1
        assert len(cache) == 1

    def test_stats(self):
        cache = TTLCache(60.0, max_size=10)
        cache.set("a", [1])
        cache.get("a")
        cache.get("missing")

        stats = cache.stats()
        assert stats.size == 1
        assert stats.max_size == 10
        assert stats.hits == 1
        assert stats.misses == 1


class TestTTLCacheInvalidation:
    """Test pattern invalidation."""

    def test_invalidate_all(self):
        cache = TTLCache(60.0)
        cache.set("a", [1])
        cache.set("b", [2])
        assert cache.invalidate() == 2
        assert len(cache) == 0

    def test_no_key_containing_pattern_survives(self):
        cache = TTLCache(60.0)
        keys = [
            "projects:workspace:ws1",
            "projects:workspace:ws2",
            "users:workspace:ws1",
            "users:all",
            "workspaces",
        ]
        for key in keys:
            cache.set(key, [key])

        removed = cache.invalidate("ws1")

        assert removed == 2
        for key in keys:
            assert (key in cache) == ("ws1" not in key)

    def test_prefix_pattern(self):
        cache = TTLCache(60.0)
        cache.set("projects:workspace:ws1", [1])
        cache.set("projects:workspace:ws2", [2])
        cache.set("users:all", [3])

        assert cache.invalidate("projects:") == 2
        assert "users:all" in cache

    def test_pattern_without_matches(self):
        cache = TTLCache(60.0)
        cache.set("a", [1])
        assert cache.invalidate("zzz") == 0
        assert "a" in cache


class TestTTLCacheGetOrCompute:
    """Test get_or_compute()."""

    @pytest.mark.asyncio
    async def test_computes_once(self):
        cache = TTLCache(60.0)
        calls = 0

        async def compute():
            nonlocal calls
            calls += 1
            return [{"id": "w1"}]

        first = await cache.get_or_compute("workspaces", compute)
        second = await cache.get_or_compute("workspaces", compute)

        assert first == second == [{"id": "w1"}]
        assert calls == 1

    @pytest.mark.asyncio
    async def test_empty_collection_is_cached(self):
        cache = TTLCache(60.0)
        calls = 0

        async def compute():
            nonlocal calls
            calls += 1
            return []

        await cache.get_or_compute("k", compute)
        await cache.get_or_compute("k", compute)
        assert calls == 1

    @pytest.mark.asyncio
    async def test_failed_compute_is_not_cached(self):
        cache = TTLCache(60.0)

        async def failing():
            raise RuntimeError("upstream down")

        with pytest.raises(RuntimeError, match="upstream down"):
            await cache.get_or_compute("k", failing)

        assert "k" not in cache

        async def succeeding():
            return [1]

        assert await cache.get_or_compute("k", succeeding) == [1]

    @pytest.mark.asyncio
    async def test_recomputes_after_expiry(self):
        clock = FakeClock()
        cache = TTLCache(10.0, clock=clock)
        values = iter([[1], [2]])

        async def compute():
            return next(values)

        assert await cache.get_or_compute("k", compute) == [1]
        clock.advance(11.0)
        assert await cache.get_or_compute("k", compute) == [2]


class TestTTLCacheConcurrency:
    """One cache shared by several threads."""

    def test_concurrent_set_get_invalidate(self):
        cache = TTLCache(60.0, max_size=50)
        start = threading.Barrier(8)

        def worker(n: int) -> int:
            start.wait()
            hits = 0
            for i in range(500):
                key = f"projects:workspace:{n}:{i % 80}"
                cache.set(key, [n, i])
                value = cache.get(key)
                if value is not None:
                    assert value[0] == n
                    hits += 1
                if i % 50 == 0:
                    cache.invalidate(f"projects:workspace:{(n + 1) % 8}:")
            return hits

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(worker, range(8)))

        stats = cache.stats()
        assert len(results) == 8
        assert len(cache) == stats.size <= 50
        assert stats.hits + stats.misses == 8 * 500

    def test_concurrent_invalidate_all(self):
        cache = TTLCache(60.0)
        start = threading.Barrier(4)

        def writer(n: int) -> None:
            start.wait()
            for i in range(300):
                cache.set(f"users:{n}:{i}", [i])

        def clearer() -> None:
            start.wait()
            for _ in range(50):
                cache.invalidate()

        with ThreadPoolExecutor(max_workers=4) as pool:
            futures = [pool.submit(writer, n) for n in range(3)] + [pool.submit(clearer)]
            for future in futures:
                future.result()

        assert 0 <= len(cache) <= 900
        assert len(cache) == cache.stats().size
        cache.invalidate()
        assert len(cache) == 0
