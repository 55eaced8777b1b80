"""
Tests for the LRU result cache.
"""
import pytest

from dynamoscan.core.cache import ResultCache


class TestResultCache:
    """Test cases for ResultCache."""

    def test_get_missing(self):
        assert ResultCache(2).get("missing") is None

    def test_put_and_get_returns_same_object(self):
        cache = ResultCache(2)
        value = object()
        cache.put("a", value)

        assert cache.get("a") is value
        assert "a" in cache
        assert len(cache) == 1

    def test_evicts_least_recently_used(self):
        cache = ResultCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.get("a")
        cache.put("c", 3)

        assert "b" not in cache
        assert cache.get("a") == 1
        assert cache.get("c") == 3

    def test_never_exceeds_capacity(self):
        cache = ResultCache(3)
        for i in range(10):
            cache.put(i, i)
            assert len(cache) <= 3
        assert [i for i in range(10) if i in cache] == [7, 8, 9]

    def test_rewrite_refreshes_recency(self):
        cache = ResultCache(2)
        cache.put("a", 1)
        cache.put("b", 2)
        cache.put("a", 1)
        cache.put("c", 3)
        assert "a" in cache and "b" not in cache

    @pytest.mark.parametrize("size", [0, -1])
    def test_invalid_capacity(self, size):
        with pytest.raises(ValueError):
            ResultCache(size)
