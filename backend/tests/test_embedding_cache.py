"""Tests for the TTL + capacity bounded embedding cache."""

import numpy as np

from services.embedding_cache import EmbeddingCache, cache_key


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _vec(value: float) -> np.ndarray:
    return np.full(4, value, dtype=np.float32)


class TestCacheKey:
    def test_deterministic(self):
        assert cache_key("python developer") == cache_key("python developer")

    def test_distinct_texts(self):
        assert cache_key("python") != cache_key("java")


class TestEmbeddingCache:
    def test_put_and_get(self):
        cache = EmbeddingCache()
        cache.put("a", _vec(1.0))
        assert np.array_equal(cache.get("a"), _vec(1.0))
        assert len(cache) == 1

    def test_miss_counts(self):
        cache = EmbeddingCache()
        assert cache.get("missing") is None
        stats = cache.stats()
        assert stats.misses == 1
        assert stats.hits == 0

    def test_ttl_expiry(self):
        clock = FakeClock()
        cache = EmbeddingCache(ttl_seconds=10, clock=clock)
        cache.put("a", _vec(1.0))
        clock.now += 9.9
        assert cache.get("a") is not None
        clock.now += 0.2
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_eviction_removes_oldest_fifth(self):
        clock = FakeClock()
        cache = EmbeddingCache(max_size=10, clock=clock)
        for i in range(10):
            cache.put(f"k{i}", _vec(i))
            clock.now += 1
        cache.put("new", _vec(99))
        # 20% of 10 = 2 oldest evicted
        assert "k0" not in cache
        assert "k1" not in cache
        assert "k2" in cache
        assert "new" in cache
        assert len(cache) == 9

    def test_eviction_prefers_expired(self):
        clock = FakeClock()
        cache = EmbeddingCache(ttl_seconds=5, max_size=3, clock=clock)
        cache.put("old", _vec(0))
        clock.now += 10
        cache.put("b", _vec(1))
        cache.put("c", _vec(2))
        cache.put("d", _vec(3))
        assert "old" not in cache
        assert all(k in cache for k in ("b", "c", "d"))

    def test_small_cache_evicts_at_least_one(self):
        cache = EmbeddingCache(max_size=2)
        cache.put("a", _vec(0))
        cache.put("b", _vec(1))
        cache.put("c", _vec(2))
        assert len(cache) == 2
        assert "c" in cache

    def test_zero_capacity_never_stores(self):
        cache = EmbeddingCache(max_size=0)
        cache.put("a", _vec(1.0))
        assert len(cache) == 0
        assert cache.get("a") is None

    def test_contains_does_not_count(self):
        cache = EmbeddingCache()
        cache.put("a", _vec(1.0))
        assert "a" in cache
        assert "b" not in cache
        stats = cache.stats()
        assert stats.hits == 0
        assert stats.misses == 0

    def test_clear_resets(self):
        cache = EmbeddingCache()
        cache.put("a", _vec(1.0))
        cache.get("a")
        cache.clear()
        stats = cache.stats()
        assert stats.size == 0
        assert stats.hits == 0
        assert stats.oldest_entry_age_seconds is None

    def test_stats(self):
        clock = FakeClock()
        cache = EmbeddingCache(ttl_seconds=60, max_size=5, clock=clock)
        cache.put("a", _vec(1.0))
        clock.now += 3
        cache.get("a")
        cache.get("a")
        cache.get("b")
        stats = cache.stats()
        assert stats.size == 1
        assert stats.max_size == 5
        assert stats.ttl_seconds == 60
        assert stats.hits == 2
        assert stats.misses == 1
        assert stats.hit_rate == 0.667
        assert stats.oldest_entry_age_seconds == 3.0
