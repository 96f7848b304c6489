"""
RenewalPro API - Record Cache Tests
"""

from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest
from pydantic import BaseModel
from redis.exceptions import ConnectionError as RedisConnectionError

from renewalpro.services.cache import CacheRegistry, RecordCache
from tests.factories import InMemoryRedis


@dataclass(frozen=True)
class Row:
    id: str
    is_available: bool = True


class TestRecordCache:
    """Load, patch and optimistic updates."""

    def test_load_keeps_fetch_order(self):
        cache = RecordCache()
        cache.load([{"id": "b"}, {"id": "a"}])
        assert [r["id"] for r in cache.values()] == ["b", "a"]
        assert len(cache) == 2
        assert "a" in cache

    def test_patch_dataclass(self):
        cache = RecordCache()
        cache.load([Row("a")])
        patched = cache.patch("a", is_available=False)
        assert patched.is_available is False
        assert cache.get("a") == Row("a", False)

    def test_patch_missing_record(self):
        with pytest.raises(KeyError):
            RecordCache().patch("missing", is_available=False)

    async def test_optimistic_keeps_patch_on_success(self):
        cache = RecordCache()
        cache.load([Row("a")])
        async with cache.optimistic("a", is_available=False) as patched:
            assert patched.is_available is False
        assert cache.get("a").is_available is False

    async def test_optimistic_rolls_back_on_failure(self):
        cache = RecordCache()
        cache.load([Row("a")])
        with pytest.raises(RuntimeError):
            async with cache.optimistic("a", is_available=False):
                assert cache.get("a").is_available is False
                raise RuntimeError("store write failed")
        assert cache.get("a").is_available is True

    async def test_optimistic_on_uncached_record(self):
        cache = RecordCache()
        async with cache.optimistic("ghost", is_available=False) as patched:
            assert patched is None
        assert "ghost" not in cache


class Agent(BaseModel):
    id: str
    company_name: str
    is_available: bool = True


def registry(client=None, ttl_seconds=60) -> CacheRegistry:
    return CacheRegistry(ttl_seconds=ttl_seconds, client=client or InMemoryRedis())


def agents_cache(*rows: Agent) -> RecordCache:
    cache = RecordCache()
    cache.load(rows or [Agent(id="a", company_name="Harbor")])
    return cache


class TestCacheRegistry:
    """Shared snapshots in Redis."""

    def test_key_format(self):
        assert registry().key("admin", "agents") == "renewalpro:cache:admin:agents"

    async def test_store_and_fetch(self):
        redis = InMemoryRedis()
        cache = registry(redis)
        assert await cache.fetch("admin", "agents", Agent) is None

        assert await cache.store("admin", "agents", agents_cache()) is True
        assert redis.ttls["renewalpro:cache:admin:agents"] == 60

        fetched = await cache.fetch("admin", "agents", Agent)
        assert fetched.values() == [Agent(id="a", company_name="Harbor")]

    async def test_zero_ttl_stores_nothing(self):
        redis = InMemoryRedis()
        assert await registry(redis, ttl_seconds=0).store("admin", "agents", agents_cache()) is False
        assert redis.values == {}

    async def test_workers_share_one_snapshot(self):
        redis = InMemoryRedis()
        worker_a, worker_b = registry(redis), registry(redis)
        await worker_b.store("admin", "agents", agents_cache())

        cache = await worker_a.fetch("admin", "agents", Agent)
        async with worker_a.optimistic("admin", "agents", cache, "a", is_available=False):
            pass

        seen = await worker_b.fetch("admin", "agents", Agent)
        assert seen.get("a").is_available is False

    async def test_failed_write_drops_shared_snapshot(self):
        redis = InMemoryRedis()
        cache = registry(redis)
        working = agents_cache()
        await cache.store("admin", "agents", working)

        with pytest.raises(RuntimeError):
            async with cache.optimistic("admin", "agents", working, "a", is_available=False):
                seen = await cache.fetch("admin", "agents", Agent)
                assert seen.get("a").is_available is False
                raise RuntimeError("commit failed")

        assert working.get("a").is_available is True
        assert await cache.fetch("admin", "agents", Agent) is None

    async def test_invalidate_scope(self):
        cache = registry()
        await cache.store("admin", "agents", agents_cache())
        await cache.store("admin", "users", agents_cache())
        await cache.store("other", "agents", agents_cache())

        assert await cache.invalidate("admin") == 2
        assert await cache.fetch("other", "agents", Agent) is not None

    async def test_redis_outage_is_a_miss(self):
        client = AsyncMock()
        client.get = AsyncMock(side_effect=RedisConnectionError("refused"))
        client.setex = AsyncMock(side_effect=RedisConnectionError("refused"))
        cache = registry(client)

        assert await cache.fetch("admin", "agents", Agent) is None
        assert await cache.store("admin", "agents", agents_cache()) is False
