"""Tests for the client query cache and the Redis list cache."""

import asyncio

import pytest
import redis.asyncio as redis

from voyage_planner.client.query_cache import QueryCache
from voyage_planner.config import settings
from voyage_planner.utils import cache as cache_module
from voyage_planner.utils.cache import cache_key, cached, invalidate_cache


@pytest.mark.unit
@pytest.mark.asyncio
class TestQueryCache:

    async def test_fetches_once_until_invalidated(self):
        cache = QueryCache()
        calls = 0

        async def fetch():
            nonlocal calls
            calls += 1
            return [calls]

        assert await cache.get("voyages", fetch) == [1]
        assert await cache.get("voyages", fetch) == [1]
        assert calls == 1

        assert cache.invalidate("voyages") is True
        assert cache.invalidate("voyages") is False
        assert await cache.get("voyages", fetch) == [2]

    async def test_keys_are_independent(self):
        cache = QueryCache()

        async def vessels():
            return ["v"]

        async def unit_types():
            return ["u"]

        assert await cache.get("vessels", vessels) == ["v"]
        assert await cache.get("unitTypes", unit_types) == ["u"]
        cache.invalidate("vessels")
        assert cache.peek("vessels") is None
        assert cache.peek("unitTypes") == ["u"]

    async def test_concurrent_misses_share_one_fetch(self):
        cache = QueryCache()
        calls = 0
        release = asyncio.Event()

        async def fetch():
            nonlocal calls
            calls += 1
            await release.wait()
            return "value"

        tasks = [asyncio.create_task(cache.get("k", fetch)) for _ in range(3)]
        await asyncio.sleep(0)
        release.set()

        assert await asyncio.gather(*tasks) == ["value"] * 3
        assert calls == 1

    async def test_failed_fetch_is_not_cached(self):
        cache = QueryCache()

        async def boom():
            raise RuntimeError("down")

        with pytest.raises(RuntimeError):
            await cache.get("k", boom)
        assert cache.peek("k") is None


@pytest.mark.unit
class TestCacheKey:

    def test_cache_key_generation(self):
        assert cache_key(limit=50, offset=0) == cache_key(limit=50, offset=0)
        assert cache_key(limit=50, offset=0) != cache_key(limit=100, offset=0)
        assert cache_key() == "default"


class _BrokenRedis:
    async def get(self, key):
        raise redis.ConnectionError("no redis")

    async def setex(self, key, ttl, value):
        raise redis.ConnectionError("no redis")

    def scan_iter(self, match=None):
        raise redis.ConnectionError("no redis")


@pytest.mark.unit
@pytest.mark.asyncio
class TestCachedDecorator:

    async def test_disabled_cache_calls_through(self, monkeypatch):
        monkeypatch.setattr(settings, "cache_enabled", False)
        calls = 0

        @cached(prefix="test")
        async def expensive():
            nonlocal calls
            calls += 1
            return {"n": calls}

        assert await expensive() == {"n": 1}
        assert await expensive() == {"n": 2}

    async def test_redis_failure_falls_back_to_uncached(self, monkeypatch):
        monkeypatch.setattr(settings, "cache_enabled", True)

        async def broken():
            return _BrokenRedis()

        monkeypatch.setattr(cache_module, "get_redis", broken)

        @cached(prefix="test")
        async def expensive():
            return {"value": 42}

        assert await expensive() == {"value": 42}
        await invalidate_cache("test:*")  # logs, does not raise
