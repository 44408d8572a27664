"""
Tests for status store implementations.
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from job_status import InMemoryStatusStore, Status, StoreConnectionError, StoreWriteError
from job_status.config import RedisConfig, Settings
from job_status.storage import RedisStatusStore


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestInMemoryStatusStore:
    """Test InMemoryStatusStore."""

    @pytest.mark.asyncio
    async def test_put_and_get(self):
        store = InMemoryStatusStore()

        await store.put("j1", Status.WORKING, 60)
        record = await store.get("j1")

        assert record.job_id == "j1"
        assert record.status is Status.WORKING
        assert record.ttl == 60

    @pytest.mark.asyncio
    async def test_last_write_wins(self):
        store = InMemoryStatusStore()

        await store.put("j1", Status.WORKING)
        await store.put("j1", Status.COMPLETE)
        await store.put("j1", Status.COMPLETE)

        assert (await store.get("j1")).status is Status.COMPLETE
        assert len(store.history) == 3

    @pytest.mark.asyncio
    async def test_expiry(self):
        clock = FakeClock()
        store = InMemoryStatusStore(clock=clock)

        await store.put("j1", Status.COMPLETE, 10)
        clock.now += 9
        assert await store.get("j1") is not None

        clock.now += 1
        assert await store.get("j1") is None

    @pytest.mark.asyncio
    async def test_no_ttl_never_expires(self):
        clock = FakeClock()
        store = InMemoryStatusStore(clock=clock)

        await store.put("j1", Status.FAILED)
        clock.now += 10 ** 9

        assert (await store.get("j1")).status is Status.FAILED

    @pytest.mark.asyncio
    async def test_default_ttl(self):
        store = InMemoryStatusStore(default_ttl=30)

        await store.put("j1", Status.WORKING)

        assert (await store.get("j1")).ttl == 30

    @pytest.mark.asyncio
    async def test_accepts_status_strings(self):
        store = InMemoryStatusStore()

        await store.put("j1", "retrying")

        assert (await store.get("j1")).status is Status.RETRYING

    @pytest.mark.asyncio
    async def test_rejects_unknown_status(self):
        store = InMemoryStatusStore()

        with pytest.raises(ValueError):
            await store.put("j1", "paused")

    @pytest.mark.asyncio
    async def test_clear(self):
        store = InMemoryStatusStore()
        await store.put("j1", Status.WORKING)

        store.clear()

        assert store.history == []
        assert await store.get("j1") is None

    @pytest.mark.asyncio
    async def test_history_is_bounded(self):
        store = InMemoryStatusStore(history_limit=2)

        await store.put("j1", Status.WORKING)
        await store.put("j1", Status.COMPLETE)
        await store.put("j2", Status.WORKING)

        assert [(r.job_id, r.status) for r in store.history] == [
            ("j1", Status.COMPLETE),
            ("j2", Status.WORKING),
        ]

    @pytest.mark.asyncio
    async def test_expired_records_purged_on_write(self):
        clock = FakeClock()
        store = InMemoryStatusStore(clock=clock)
        await store.put("j1", Status.WORKING, ttl=10)
        await store.put("j2", Status.WORKING)

        clock.now += 10
        await store.put("j3", Status.WORKING, ttl=10)

        assert len(store) == 2
        assert await store.get("j1") is None


@pytest.fixture
def redis_client():
    client = AsyncMock()
    client.set = AsyncMock(return_value=True)
    client.get = AsyncMock(return_value=None)
    return client


class TestRedisStatusStore:
    """Test RedisStatusStore against a mocked client."""

    @pytest.mark.asyncio
    async def test_put_with_ttl(self, redis_client):
        store = RedisStatusStore(redis_client)

        await store.put("j1", Status.WORKING, 120)

        key, payload = redis_client.set.await_args.args
        assert key == "job_status:j1"
        assert redis_client.set.await_args.kwargs == {"ex": 120}
        data = json.loads(payload)
        assert data["job_id"] == "j1"
        assert data["status"] == "working"
        assert data["ttl"] == 120

    @pytest.mark.asyncio
    async def test_put_without_ttl(self, redis_client):
        store = RedisStatusStore(redis_client, key_prefix="app:status")

        await store.put("j1", Status.COMPLETE)

        assert redis_client.set.await_args.args[0] == "app:status:j1"
        assert redis_client.set.await_args.kwargs == {}

    @pytest.mark.asyncio
    async def test_default_ttl(self, redis_client):
        store = RedisStatusStore(redis_client, default_ttl=45)

        await store.put("j1", Status.COMPLETE)

        assert redis_client.set.await_args.kwargs == {"ex": 45}

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(self, redis_client):
        redis_client.set.side_effect = RedisConnectionError("refused")
        store = RedisStatusStore(redis_client)

        with pytest.raises(StoreConnectionError) as info:
            await store.put("j1", Status.WORKING, 10)

        assert info.value.context.job_id == "j1"
        assert info.value.context.key == "job_status:j1"
        assert isinstance(info.value.cause, RedisConnectionError)

    @pytest.mark.asyncio
    async def test_write_error_wrapped(self, redis_client):
        redis_client.set.side_effect = ResponseError("READONLY")
        store = RedisStatusStore(redis_client)

        with pytest.raises(StoreWriteError):
            await store.put("j1", Status.WORKING, 10)

    @pytest.mark.asyncio
    async def test_get_roundtrip(self, redis_client):
        redis_client.get.return_value = json.dumps(
            {"job_id": "j1", "status": "retrying", "ttl": 60, "updated_at": 1.0}
        ).encode()
        store = RedisStatusStore(redis_client)

        record = await store.get("j1")

        redis_client.get.assert_awaited_once_with("job_status:j1")
        assert record.status is Status.RETRYING
        assert record.updated_at == 1.0

    @pytest.mark.asyncio
    async def test_get_missing(self, redis_client):
        store = RedisStatusStore(redis_client)

        assert await store.get("j1") is None

    @pytest.mark.asyncio
    async def test_close(self, redis_client):
        store = RedisStatusStore(redis_client)

        await store.close()

        redis_client.aclose.assert_awaited_once()

    def test_from_url(self):
        store = RedisStatusStore.from_url("redis://localhost:6379/3", key_prefix="x")

        assert store._prefix == "x"

    def test_from_config(self):
        config = RedisConfig(url="redis://localhost:6379/4", key_prefix="cfg")

        store = RedisStatusStore.from_config(config, default_ttl=30)

        assert store._prefix == "cfg"
        assert store._default_ttl == 30

    def test_from_settings(self):
        settings = Settings(redis=RedisConfig(url="redis://localhost:6379/5", key_prefix="settings"))

        store = RedisStatusStore.from_settings(settings)

        assert store._prefix == "settings"

    def test_from_global_settings(self, monkeypatch):
        import job_status.config as cfg
        monkeypatch.setattr(cfg, "_global_settings", Settings(redis=RedisConfig(key_prefix="global")))

        store = RedisStatusStore.from_settings()

        assert store._prefix == "global"
