# tests/test_storage.py
"""
Used-token store contract, run against both implementations.

The Redis store runs on fakeredis so the tests stay in-memory.
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from redis.exceptions import ConnectionError as RedisConnectionError

from jwt_auth.adapters.storage.memory_store import MemoryTokenStorageManager
from jwt_auth.adapters.storage.redis_store import RedisTokenStorageManager
from jwt_auth.config.settings import RedisStorageSettings
from jwt_auth.domain.constants import USED_TOKEN_TTL_SECONDS
from jwt_auth.domain.exceptions import ReplayError, StorageUnavailableError

TOKEN_HASH = "a9993e364706816aba3e25717850c26c9cd0d89d"


@pytest_asyncio.fixture
async def fake_redis():
    r = FakeAsyncRedis(decode_responses=True)
    await r.flushall()
    yield r
    await r.aclose()


@pytest_asyncio.fixture(params=["memory", "redis"])
async def manager(request, fake_redis):
    if request.param == "memory":
        return MemoryTokenStorageManager()
    return RedisTokenStorageManager(fake_redis, cache_prefix="jwt-auth-token-test")


@pytest.mark.asyncio
async def test_unused_token_is_unused(manager):
    assert await manager.is_token_used(TOKEN_HASH) == TOKEN_HASH


@pytest.mark.asyncio
async def test_mark_unused_token(manager):
    await manager.mark_token_used(TOKEN_HASH)


@pytest.mark.asyncio
async def test_used_token_is_used(manager):
    await manager.mark_token_used(TOKEN_HASH)
    with pytest.raises(ReplayError, match="Token Already Used"):
        await manager.is_token_used(TOKEN_HASH)


@pytest.mark.asyncio
async def test_mark_used_token_fails(manager):
    await manager.mark_token_used(TOKEN_HASH)
    with pytest.raises(ReplayError):
        await manager.mark_token_used(TOKEN_HASH)


@pytest.mark.asyncio
async def test_hashes_are_independent(manager):
    await manager.mark_token_used(TOKEN_HASH)
    other = "0" * 40
    assert await manager.is_token_used(other) == other


@pytest.mark.asyncio
async def test_concurrent_marks_only_one_wins(manager):
    results = await asyncio.gather(
        *(manager.mark_token_used(TOKEN_HASH) for _ in range(5)),
        return_exceptions=True,
    )
    assert results.count(None) == 1
    assert sum(isinstance(r, ReplayError) for r in results) == 4


# -------------------- Redis specifics --------------------


@pytest.mark.asyncio
async def test_redis_key_layout_and_ttl(fake_redis):
    manager = RedisTokenStorageManager(fake_redis, cache_prefix="pfx")
    await manager.mark_token_used(TOKEN_HASH)

    assert await fake_redis.get(f"pfx:{TOKEN_HASH}") == TOKEN_HASH
    ttl = await fake_redis.ttl(f"pfx:{TOKEN_HASH}")
    assert USED_TOKEN_TTL_SECONDS - 5 <= ttl <= USED_TOKEN_TTL_SECONDS


@pytest.mark.asyncio
async def test_redis_prefixes_are_isolated(fake_redis):
    first = RedisTokenStorageManager(fake_redis, cache_prefix="one")
    second = RedisTokenStorageManager(fake_redis, cache_prefix="two")
    await first.mark_token_used(TOKEN_HASH)

    assert await second.is_token_used(TOKEN_HASH) == TOKEN_HASH


@pytest.mark.asyncio
async def test_redis_foreign_value_is_not_a_use(fake_redis):
    manager = RedisTokenStorageManager(fake_redis, cache_prefix="pfx")
    await fake_redis.set(f"pfx:{TOKEN_HASH}", "something-else")

    assert await manager.is_token_used(TOKEN_HASH) == TOKEN_HASH


@pytest.mark.asyncio
async def test_redis_conditional_write_catches_lost_race(fake_redis):
    manager = RedisTokenStorageManager(fake_redis, cache_prefix="pfx")
    # key appears between the read and the write
    original_get = fake_redis.get

    async def racing_get(key):
        value = await original_get(key)
        await fake_redis.set(key, "written-by-another-process")
        return value

    fake_redis.get = racing_get
    with pytest.raises(ReplayError):
        await manager.mark_token_used(TOKEN_HASH)


@pytest.mark.asyncio
async def test_redis_failure_is_storage_unavailable():
    r = AsyncMock()
    r.get.side_effect = RedisConnectionError("connection refused")
    r.set.side_effect = RedisConnectionError("connection refused")
    manager = RedisTokenStorageManager(r)

    with pytest.raises(StorageUnavailableError):
        await manager.is_token_used(TOKEN_HASH)
    with pytest.raises(StorageUnavailableError):
        await manager.mark_token_used(TOKEN_HASH)


def test_redis_from_settings():
    manager = RedisTokenStorageManager.from_settings(
        RedisStorageSettings(host="cache.internal", port=6380, db=15, cache_prefix="svc")
    )
    kwargs = manager.r.connection_pool.connection_kwargs
    assert kwargs["host"] == "cache.internal"
    assert kwargs["port"] == 6380
    assert kwargs["db"] == 15
    assert manager._k(TOKEN_HASH) == f"svc:{TOKEN_HASH}"
