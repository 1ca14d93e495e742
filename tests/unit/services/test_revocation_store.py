from unittest.mock import AsyncMock

import pytest

from src.adapter.services.revocation_store import (
    MemoryRevocationStore,
    RedisRevocationStore,
    build_revocation_store,
)


@pytest.mark.asyncio
async def test_memory_store_add_and_contains():
    store = MemoryRevocationStore()

    await store.add("digest-1", 60)

    assert await store.contains("digest-1") is True
    assert await store.contains("digest-2") is False


@pytest.mark.asyncio
async def test_memory_store_entries_expire(monkeypatch):
    store = MemoryRevocationStore()
    clock = [1000.0]
    monkeypatch.setattr(
        "src.adapter.services.revocation_store.time.monotonic", lambda: clock[0]
    )

    await store.add("digest", 10)
    clock[0] += 11

    assert await store.contains("digest") is False


@pytest.mark.asyncio
async def test_memory_store_close_clears():
    store = MemoryRevocationStore()
    await store.add("digest", 60)

    await store.close()

    assert await store.contains("digest") is False


class _Config:
    CACHE_BACKEND = "memory"
    REDIS_URL = "redis://localhost:6379/0"


def test_build_memory_store():
    assert isinstance(build_revocation_store(_Config), MemoryRevocationStore)


def test_build_redis_store_without_connecting():
    config = type("RedisConfig", (_Config,), {"CACHE_BACKEND": "redis"})

    store = build_revocation_store(config)

    assert isinstance(store, RedisRevocationStore)
    assert store.redis_url == "redis://localhost:6379/0"


def test_build_unknown_backend_fails():
    config = type("BadConfig", (_Config,), {"CACHE_BACKEND": "memcached"})

    with pytest.raises(ValueError):
        build_revocation_store(config)


def redis_store(client):
    store = RedisRevocationStore("redis://localhost:6379/0")
    store.client = client
    return store


def shared_fake_client():
    """AsyncMock client whose set/exists/ttl share one key space"""
    keys = {}

    async def _set(key, value, ex=None):
        keys[key] = ex

    client = AsyncMock()
    client.set.side_effect = _set
    client.exists.side_effect = lambda key: int(key in keys)
    client.ttl.side_effect = lambda key: keys.get(key, -2)
    return client


@pytest.mark.asyncio
async def test_redis_store_add_sets_key_with_ttl():
    store = redis_store(AsyncMock())

    await store.add("digest", 60)

    store.client.set.assert_awaited_once_with("auth:revoked:digest", "1", ex=60)
    assert await store._local.contains("digest") is True


@pytest.mark.asyncio
async def test_redis_store_add_clamps_ttl():
    store = redis_store(AsyncMock())

    await store.add("digest", 0)

    store.client.set.assert_awaited_once_with("auth:revoked:digest", "1", ex=1)


@pytest.mark.asyncio
async def test_redis_store_miss():
    client = AsyncMock()
    client.exists.return_value = 0
    store = redis_store(client)

    assert await store.contains("digest") is False
    client.exists.assert_awaited_once_with("auth:revoked:digest")
    client.ttl.assert_not_awaited()


@pytest.mark.asyncio
async def test_redis_store_hit_is_cached_locally(monkeypatch):
    clock = [1000.0]
    monkeypatch.setattr(
        "src.adapter.services.revocation_store.time.monotonic", lambda: clock[0]
    )
    client = AsyncMock()
    client.exists.return_value = 1
    client.ttl.return_value = 30
    store = redis_store(client)

    assert await store.contains("digest") is True
    assert store._local._entries["digest"] == 1030.0

    assert await store.contains("digest") is True
    assert client.exists.await_count == 1

    # Once the copied TTL runs out the network is asked again
    clock[0] += 31
    client.exists.return_value = 0
    assert await store.contains("digest") is False
    assert client.exists.await_count == 2


@pytest.mark.asyncio
async def test_redis_store_revocation_visible_to_other_instance():
    client = shared_fake_client()
    first = redis_store(client)
    second = redis_store(client)

    await first.add("digest", 120)

    assert await second.contains("digest") is True
    assert await second.contains("other") is False
    assert await second._local.contains("digest") is True


@pytest.mark.asyncio
async def test_redis_store_close():
    store = redis_store(AsyncMock())
    await store.add("digest", 60)

    await store.close()

    store.client.aclose.assert_awaited_once()
    assert store._local._entries == {}
