"""
Unit tests for the expiring LRU caches.
"""

import asyncio
import time
from datetime import date
from unittest.mock import AsyncMock

import pytest

from zabbix_mcp.cache import APICache, CacheRegistry, ExpiringCache, build_caches
from zabbix_mcp.config import CacheSettings


class TestBasicOperations:

    def test_set_and_get(self, cache):
        cache.set("key1", "value1")
        assert cache.get("key1") == "value1"

    def test_missing_key_returns_default(self, cache):
        assert cache.get("nonexistent") is None
        assert cache.get("nonexistent", "fallback") == "fallback"

    def test_delete(self, cache):
        cache.set("key1", "value1")
        assert cache.delete("key1") is True
        assert cache.get("key1") is None

    def test_delete_nonexistent_key(self, cache):
        assert cache.delete("nonexistent") is False
        assert cache.get_stats()["deletes"] == 0

    def test_has_and_contains(self, cache):
        cache.set("key1", "value1")
        assert cache.has("key1") is True
        assert "key1" in cache
        assert cache.has("nonexistent") is False

    def test_has_does_not_touch_stats(self, cache):
        cache.set("key1", "value1")
        cache.has("key1")
        cache.has("nonexistent")

        stats = cache.get_stats()
        assert stats["hits"] == 0
        assert stats["misses"] == 0

    def test_clear_empties_but_keeps_lifetime_stats(self, cache):
        for i in range(3):
            cache.set(f"key{i}", i)
        cache.clear()

        assert cache.size() == 0
        assert len(cache) == 0
        assert cache.get_stats()["sets"] == 3

    def test_overwrite_replaces_value(self, cache):
        cache.set("key1", "value1")
        cache.set("key1", "value2")

        assert cache.get("key1") == "value2"
        stats = cache.get_stats()
        assert stats["sets"] == 2
        assert stats["size"] == 1

    def test_overwrite_at_capacity_is_not_an_eviction(self, cache):
        for i in range(5):
            cache.set(f"key{i}", i)
        cache.set("key0", "new")

        assert cache.size() == 5
        assert cache.get_stats()["evictions"] == 0
        assert cache.get("key0") == "new"

    def test_stores_falsy_values(self, cache):
        cache.set("zero", 0)
        cache.set("empty", [])
        assert cache.get("zero", "missing") == 0
        assert cache.get("empty", "missing") == []

    @pytest.mark.parametrize("key", ["", None, 42])
    def test_rejects_invalid_keys(self, cache, key):
        with pytest.raises(ValueError):
            cache.set(key, "value")


class TestTTL:

    def test_entry_expires_after_ttl(self, cache, clock):
        cache.set("key1", "value1", 0.1)
        assert cache.get("key1") == "value1"

        clock.advance(0.15)
        assert cache.get("key1") is None

    def test_entry_is_live_until_ttl_passes(self, cache, clock):
        cache.set("key1", "value1", 0.1)
        clock.advance(0.1)
        assert cache.get("key1") == "value1"

    def test_default_ttl_used_when_not_given(self, cache, clock):
        cache.set("key1", "value1")
        clock.advance(0.5)
        assert cache.get("key1") == "value1"

        clock.advance(0.6)
        assert cache.get("key1") is None

    def test_zero_ttl_means_default(self, cache, clock):
        cache.set("key1", "value1", 0)
        clock.advance(0.5)
        assert cache.get("key1") == "value1"

    def test_negative_ttl_rejected(self, cache):
        with pytest.raises(ValueError):
            cache.set("key1", "value1", -1)

    def test_has_reports_expired_entries_as_absent(self, cache, clock):
        cache.set("key1", "value1", 0.1)
        assert cache.has("key1") is True

        clock.advance(0.15)
        assert cache.has("key1") is False
        assert cache.size() == 0

    def test_lazy_expiry_counts_miss_not_delete(self, cache, clock):
        cache.set("key1", "value1", 0.1)
        clock.advance(0.15)
        cache.get("key1")

        stats = cache.get_stats()
        assert stats["misses"] == 1
        assert stats["deletes"] == 0
        assert stats["size"] == 0

    def test_real_clock_expiry(self):
        cache = ExpiringCache(max_size=5, default_ttl=1.0, cleanup_interval=None)
        try:
            cache.set("key1", "value1", 0.05)
            assert cache.get("key1") == "value1"
            time.sleep(0.1)
            assert cache.get("key1") is None
        finally:
            cache.destroy()


class TestLRUEviction:

    def test_capacity_never_exceeded(self, clock):
        cache = ExpiringCache(max_size=100, cleanup_interval=None, clock=clock)
        for i in range(200):
            cache.set(f"key{i}", f"value{i}")
            assert cache.size() <= 100

        assert cache.get("key199") == "value199"
        assert cache.get_stats()["evictions"] == 100
        cache.destroy()

    def test_evicts_least_recently_used(self, cache, clock):
        for i in range(1, 7):
            cache.set(f"key{i}", i)
            clock.advance(0.01)

        assert cache.size() == 5
        assert cache.get_stats()["evictions"] == 1
        assert cache.has("key1") is False
        assert all(cache.has(f"key{i}") for i in range(2, 7))

    def test_get_refreshes_recency(self, clock):
        cache = ExpiringCache(max_size=3, cleanup_interval=None, clock=clock)
        for key in ("A", "B", "C"):
            cache.set(key, key)
            clock.advance(0.01)

        cache.get("A")
        clock.advance(0.01)
        cache.set("D", "D")

        assert cache.has("A")
        assert not cache.has("B")
        assert cache.has("C")
        assert cache.has("D")
        cache.destroy()

    def test_ties_go_to_first_in_access_order(self, clock):
        # Clock never advances, so every entry shares one timestamp
        cache = ExpiringCache(max_size=3, cleanup_interval=None, clock=clock)
        for key in ("A", "B", "C"):
            cache.set(key, key)

        cache.get("A")
        cache.set("D", "D")

        assert sorted(k for k in "ABCD" if cache.has(k)) == ["A", "C", "D"]
        cache.destroy()

    def test_overwrite_refreshes_recency(self, clock):
        cache = ExpiringCache(max_size=3, cleanup_interval=None, clock=clock)
        for key in ("A", "B", "C"):
            cache.set(key, key)

        cache.set("A", "A2")
        cache.set("D", "D")
        cache.set("E", "E")

        assert sorted(k for k in "ABCDE" if cache.has(k)) == ["A", "D", "E"]
        assert cache.get("A") == "A2"
        cache.destroy()

    def test_eviction_does_not_count_as_delete(self, cache):
        cache.set("key1", "value1")
        cache.set("key2", "value2")
        cache.delete("key1")

        for i in range(3, 8):
            cache.set(f"key{i}", f"value{i}")

        stats = cache.get_stats()
        assert stats["sets"] == 7
        assert stats["deletes"] == 1
        assert stats["evictions"] == 1
        assert stats["size"] == 5


class TestStatistics:

    def test_hits_misses_and_hit_rate(self, cache):
        cache.set("key1", "value1")
        cache.get("key1")
        cache.get("nonexistent")

        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == "50.00%"

    def test_hit_rate_formatting(self, cache):
        cache.set("key1", "value1")
        cache.get("key1")
        cache.get("key1")
        cache.get("nonexistent")
        assert cache.get_stats()["hit_rate"] == "66.67%"

    def test_zero_lookups_hit_rate(self, cache):
        assert cache.get_stats()["hit_rate"] == "0%"

    def test_size_and_capacity(self, cache):
        cache.set("key1", "value1")
        cache.set("key2", "value2")

        stats = cache.get_stats()
        assert stats["size"] == 2
        assert stats["max_size"] == 5

    def test_stats_snapshot_is_a_copy(self, cache):
        snapshot = cache.get_stats()
        cache.set("key1", "value1")
        assert snapshot["sets"] == 0


class TestCleanup:

    def test_cleanup_removes_only_expired(self, cache, clock):
        cache.set("key1", "value1", 0.1)
        cache.set("key2", "value2", 1.0)
        clock.advance(0.15)

        assert cache.cleanup() == 1
        assert cache.get("key1") is None
        assert cache.get("key2") == "value2"

    def test_cleanup_counts_runs_that_removed_entries(self, cache, clock):
        for i in range(3):
            cache.set(f"key{i}", i, 0.1)
        clock.advance(0.15)

        cache.cleanup()
        stats = cache.get_stats()
        assert stats["cleanups"] == 1
        assert stats["size"] == 0
        assert stats["deletes"] == 0
        assert not any(cache.has(f"key{i}") for i in range(3))

    def test_noop_cleanup_is_not_counted(self, cache):
        cache.set("key1", "value1")
        assert cache.cleanup() == 0
        assert cache.get_stats()["cleanups"] == 0


class TestConstruction:

    def test_defaults(self):
        cache = ExpiringCache(cleanup_interval=None)
        assert cache.max_size == 1000
        assert cache.default_ttl == 300.0
        cache.destroy()

    @pytest.mark.parametrize("kwargs", [
        {"max_size": 0},
        {"max_size": -1},
        {"max_size": 1.5},
        {"default_ttl": 0},
        {"default_ttl": -5},
        {"cleanup_interval": 0},
        {"cleanup_interval": -1},
    ])
    def test_invalid_arguments_fail_fast(self, kwargs):
        with pytest.raises(ValueError):
            ExpiringCache(**kwargs)


class TestLifecycle:

    def test_destroy_clears_entries(self):
        cache = ExpiringCache(cleanup_interval=None)
        cache.set("key1", "value1")
        cache.destroy()
        assert cache.get_stats()["size"] == 0

    def test_destroy_twice_is_safe(self, cache):
        cache.set("key1", "value1")
        cache.destroy()
        cache.destroy()
        assert cache.size() == 0

    def test_usable_after_destroy(self, cache):
        cache.destroy()
        cache.set("key1", "value1")
        assert cache.get("key1") == "value1"

    def test_background_sweep_runs_and_stops(self):
        cache = ExpiringCache(max_size=10, default_ttl=0.01, cleanup_interval=0.05)
        thread = cache._cleanup_thread
        try:
            cache.set("key1", "value1")

            deadline = time.monotonic() + 5
            while cache.get_stats()["cleanups"] == 0 and time.monotonic() < deadline:
                time.sleep(0.02)
            assert cache.get_stats()["cleanups"] == 1
            assert cache.size() == 0
        finally:
            cache.destroy()

        assert not thread.is_alive()
        cache.set("key2", "value2")
        time.sleep(0.2)
        assert cache.get_stats()["cleanups"] == 1


class TestAPICacheKeys:

    def test_keys_ignore_parameter_order(self, api_cache):
        key1 = api_cache.generate_key("/api/users", {"id": 1, "name": "test"})
        key2 = api_cache.generate_key("/api/users", {"name": "test", "id": 1})
        assert key1 == key2

    def test_nested_parameters_ignore_order(self, api_cache):
        key1 = api_cache.generate_key("host.get", {"filter": {"host": ["a"], "status": 0}, "output": "extend"})
        key2 = api_cache.generate_key("host.get", {"output": "extend", "filter": {"status": 0, "host": ["a"]}})
        assert key1 == key2

    def test_different_endpoints_give_different_keys(self, api_cache):
        assert api_cache.generate_key("/api/users", {"id": 1}) != api_cache.generate_key("/api/posts", {"id": 1})

    def test_empty_parameters(self, api_cache):
        assert api_cache.generate_key("/api/status") == "/api/status:{}"
        assert api_cache.generate_key("/api/status", {}) == "/api/status:{}"

    def test_compact_serialization(self, api_cache):
        assert api_cache.generate_key("/x", {"b": 2, "a": 1}) == '/x:{"a":1,"b":2}'

    def test_non_json_values_do_not_collide_with_strings(self, api_cache):
        as_date = api_cache.generate_key("/x", {"a": date(2024, 1, 2)})
        as_text = api_cache.generate_key("/x", {"a": "2024-01-02"})

        assert as_date != as_text
        assert as_date == api_cache.generate_key("/x", {"a": date(2024, 1, 2)})
        assert '"__type__":"datetime.date"' in as_date

    def test_defaults(self):
        cache = APICache(cleanup_interval=None)
        assert cache.max_size == 500
        assert cache.default_ttl == 300.0
        cache.destroy()


class TestCacheApiCall:

    @pytest.mark.asyncio
    async def test_second_call_served_from_cache(self, api_cache):
        fn = AsyncMock(return_value={"data": "test"})

        result1 = await api_cache.cache_api_call("/api/test", {}, fn)
        result2 = await api_cache.cache_api_call("/api/test", {}, fn)

        assert result1 == {"data": "test"}
        assert result2 == result1
        fn.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_different_parameters_call_again(self, api_cache):
        fn = AsyncMock(side_effect=[{"data": "test1"}, {"data": "test2"}])

        result1 = await api_cache.cache_api_call("/api/test", {"id": 1}, fn)
        result2 = await api_cache.cache_api_call("/api/test", {"id": 2}, fn)

        assert result1 == {"data": "test1"}
        assert result2 == {"data": "test2"}
        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_custom_ttl(self, api_cache, clock):
        fn = AsyncMock(return_value={"data": "test"})
        key = api_cache.generate_key("/api/test", {})

        await api_cache.cache_api_call("/api/test", {}, fn, 0.1)
        assert api_cache.get(key) == {"data": "test"}

        clock.advance(0.15)
        assert api_cache.get(key) is None

        await api_cache.cache_api_call("/api/test", {}, fn, 0.1)
        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_failures_propagate_and_are_not_cached(self, api_cache):
        fn = AsyncMock(side_effect=[RuntimeError("API Error"), {"data": "ok"}])

        with pytest.raises(RuntimeError, match="API Error"):
            await api_cache.cache_api_call("/api/test", {}, fn)
        assert api_cache.get(api_cache.generate_key("/api/test", {})) is None

        result = await api_cache.cache_api_call("/api/test", {}, fn)
        assert result == {"data": "ok"}
        assert fn.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_misses_each_call_producer(self, api_cache):
        calls = []

        async def fn():
            calls.append(len(calls))
            result = {"call": len(calls)}
            await asyncio.sleep(0)
            return result

        first, second = await asyncio.gather(
            api_cache.cache_api_call("/api/test", {}, fn),
            api_cache.cache_api_call("/api/test", {}, fn),
        )

        assert len(calls) == 2
        assert {first["call"], second["call"]} == {1, 2}

        third = await api_cache.cache_api_call("/api/test", {}, fn)
        assert len(calls) == 2
        assert third == second

    @pytest.mark.asyncio
    async def test_cached_none_is_a_hit(self, api_cache):
        fn = AsyncMock(return_value=None)

        assert await api_cache.cache_api_call("/api/empty", {}, fn) is None
        assert await api_cache.cache_api_call("/api/empty", {}, fn) is None
        fn.assert_awaited_once()


class TestInvalidate:

    def test_invalidate_by_prefix(self, clock):
        cache = APICache(max_size=10, cleanup_interval=None, clock=clock)
        cache.set(cache.generate_key("host.get", {"a": 1}), 1)
        cache.set(cache.generate_key("host.get", {"a": 2}), 2)
        cache.set(cache.generate_key("hostgroup.get"), 3)
        cache.set(cache.generate_key("item.get"), 4)

        assert cache.invalidate("host.") == 2
        assert cache.size() == 2
        assert cache.get_stats()["deletes"] == 2
        assert cache.invalidate("trigger.") == 0
        cache.destroy()

    def test_plain_cache_invalidates_by_prefix(self, cache):
        cache.set("host-identifier:web01", ["10"])
        cache.set("host-identifier:10.0.0.5", ["10"])
        cache.set("other", 1)

        assert cache.invalidate("host-identifier:") == 2
        assert cache.get("host-identifier:web01") is None
        assert cache.get("other") == 1


class TestCacheRegistry:

    def test_named_cache_profiles(self, settings):
        caches = build_caches(settings)
        try:
            assert isinstance(caches, CacheRegistry)
            assert type(caches.general) is ExpiringCache
            assert isinstance(caches.api, APICache)

            stats = caches.stats()
            assert stats["general"]["max_size"] == 1000
            assert stats["api"]["max_size"] == 500
            assert stats["risks"]["max_size"] == 200
            assert stats["vendors"]["max_size"] == 300
            assert caches.risks.default_ttl == 600.0
            assert caches.vendors.default_ttl == 180.0
        finally:
            caches.destroy()

    def test_instances_are_independent(self, settings):
        first = build_caches(settings)
        second = build_caches(settings)
        try:
            first.api.set("k", "v")
            assert second.api.get("k") is None
        finally:
            first.destroy()
            second.destroy()

    def test_only_general_and_api_sweep(self, settings):
        settings.cache = CacheSettings(cleanup_interval=60.0)
        caches = build_caches(settings)
        try:
            assert caches.general._cleanup_thread is not None
            assert caches.api._cleanup_thread is not None
            assert caches.risks._cleanup_thread is None
            assert caches.vendors._cleanup_thread is None
        finally:
            caches.destroy()

    def test_destroy_empties_every_cache(self, settings):
        caches = build_caches(settings)
        for cache in caches.all().values():
            cache.set("k", "v")
        caches.destroy()
        assert all(cache.size() == 0 for cache in caches.all().values())
