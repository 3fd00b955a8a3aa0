# tests/unit/test_cache.py
"""
Unit tests for RepairCache.

Covers:
- memoization and hit/miss accounting
- clear() semantics and the generation counter
- LRU bound and unbounded mode
- backing-store failures degrade to direct computation
- cancelled async computations are not stored
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from notifier.services.text_repair.cache import RepairCache


class Counter:
    """Compute function that records its calls."""

    def __init__(self):
        self.calls = []

    def __call__(self, text):
        self.calls.append(text)
        return text.upper()


class TestGetOrCompute:
    def test_computes_once_per_text(self):
        cache = RepairCache()
        compute = Counter()

        assert cache.get_or_compute("voce", compute) == "VOCE"
        assert cache.get_or_compute("voce", compute) == "VOCE"

        assert compute.calls == ["voce"]
        assert cache.hits == 1
        assert cache.misses == 1

    def test_distinct_texts_cached_separately(self):
        cache = RepairCache()
        compute = Counter()

        cache.get_or_compute("a", compute)
        cache.get_or_compute("b", compute)

        assert len(cache) == 2
        assert "a" in cache and "b" in cache

    def test_compute_errors_propagate_and_are_not_cached(self):
        cache = RepairCache()

        def broken(text):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            cache.get_or_compute("x", broken)
        assert "x" not in cache


class TestClear:
    def test_clear_drops_entries_and_stats(self):
        cache = RepairCache()
        compute = Counter()
        cache.get_or_compute("voce", compute)
        cache.get_or_compute("voce", compute)

        cache.clear()

        assert len(cache) == 0
        assert cache.stats() == {"size": 0, "maxsize": cache.maxsize, "hits": 0, "misses": 0, "generation": 1}

    def test_recomputes_after_clear(self):
        cache = RepairCache()
        compute = Counter()

        cache.get_or_compute("voce", compute)
        cache.clear()
        cache.get_or_compute("voce", compute)

        assert compute.calls == ["voce", "voce"]

    def test_value_computed_before_clear_is_not_stored(self):
        cache = RepairCache()

        def compute_then_clear(text):
            cache.clear()
            return "stale"

        assert cache.get_or_compute("x", compute_then_clear) == "stale"
        assert "x" not in cache


class TestBounds:
    def test_lru_evicts_least_recently_used(self):
        cache = RepairCache(maxsize=2)
        compute = Counter()

        cache.get_or_compute("a", compute)
        cache.get_or_compute("b", compute)
        cache.get_or_compute("a", compute)  # a is now most recent
        cache.get_or_compute("c", compute)

        assert "a" in cache
        assert "b" not in cache
        assert "c" in cache

    def test_zero_means_unbounded(self):
        cache = RepairCache(maxsize=0)
        compute = Counter()

        for i in range(50):
            cache.get_or_compute(f"text {i}", compute)

        assert len(cache) == 50
        assert isinstance(cache._store, dict)


class TestStoreFailures:
    def test_lookup_failure_computes_directly(self):
        cache = RepairCache()
        cache._store = MagicMock()
        cache._store.get.side_effect = RuntimeError("store down")
        compute = Counter()

        assert cache.get_or_compute("voce", compute) == "VOCE"
        assert compute.calls == ["voce"]

    def test_write_failure_still_returns_value(self):
        cache = RepairCache()
        store = MagicMock()
        store.get.return_value = None
        store.__setitem__.side_effect = RuntimeError("store full")
        cache._store = store

        assert cache.get_or_compute("voce", Counter()) == "VOCE"


class TestAsync:
    @pytest.mark.asyncio
    async def test_async_compute_called_once(self):
        cache = RepairCache()
        compute = AsyncMock(return_value="você")

        assert await cache.get_or_compute_async("voce", compute) == "você"
        assert await cache.get_or_compute_async("voce", compute) == "você"

        compute.assert_awaited_once_with("voce")

    @pytest.mark.asyncio
    async def test_async_lookup_failure_computes_directly(self):
        cache = RepairCache()
        cache._store = MagicMock()
        cache._store.get.side_effect = RuntimeError("store down")
        compute = AsyncMock(return_value="você")

        assert await cache.get_or_compute_async("voce", compute) == "você"

    @pytest.mark.asyncio
    async def test_cancelled_compute_is_not_stored(self):
        cache = RepairCache()
        started = asyncio.Event()

        async def slow(text):
            started.set()
            await asyncio.sleep(10)
            return "never"

        task = asyncio.create_task(cache.get_or_compute_async("voce", slow))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert "voce" not in cache
