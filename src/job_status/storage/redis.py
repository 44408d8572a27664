"""
Redis-backed status store.

Requires redis (async): pip install redis

Each job's status lives under ``{key_prefix}:{job_id}`` as a JSON
StatusRecord. Writes use ``SET ... EX`` so the record expires on its own;
a write without a TTL keeps the key until it is overwritten.

TTL Warning
-----------
Records disappear silently once their TTL elapses. Pollers must treat a
missing key as "unknown", not as "never enqueued".
"""

from __future__ import annotations

import json
import logging
from typing import Any

try:
    import redis.asyncio as redis
    from redis.exceptions import ConnectionError as RedisConnectionError
    from redis.exceptions import RedisError, TimeoutError as RedisTimeoutError
    REDIS_AVAILABLE = True
except ImportError:
    redis = None  # type: ignore
    REDIS_AVAILABLE = False

from ..config import RedisConfig, Settings, get_settings
from ..errors import ErrorContext, StoreConnectionError, StoreWriteError
from ..store import StatusStore
from ..types import Status, StatusRecord

logger = logging.getLogger(__name__)


def _require_redis() -> None:
    """Raise ImportError if redis is not available."""
    if not REDIS_AVAILABLE:
        raise ImportError(
            "Redis storage requires redis. "
            "Install with: pip install redis"
        )


class RedisStatusStore(StatusStore):
    """Status store writing to Redis.

    Example:
        ```python
        store = RedisStatusStore.from_url("redis://localhost:6379/0")
        middleware = StatusMiddleware(store, expiration=60 * 30)
        ```
    """

    def __init__(
        self,
        client: Any,  # redis.Redis
        key_prefix: str = "job_status",
        default_ttl: int | None = None,
    ):
        _require_redis()
        self._client = client
        self._prefix = key_prefix
        self._default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> RedisStatusStore:
        """Create a store with a new async client for ``url``."""
        _require_redis()
        client = redis.from_url(url, decode_responses=True)
        return cls(client, **kwargs)

    @classmethod
    def from_config(cls, config: RedisConfig, **kwargs: Any) -> RedisStatusStore:
        """Create a store from a RedisConfig (``url`` and ``key_prefix``)."""
        return cls.from_url(config.url, key_prefix=config.key_prefix, **kwargs)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> RedisStatusStore:
        """Create a store from the ``redis`` section of ``settings``.

        Falls back to the global settings when none are given.
        """
        settings = settings or get_settings()
        return cls.from_config(settings.redis, **kwargs)

    def _key(self, job_id: str) -> str:
        return f"{self._prefix}:{job_id}"

    async def put(self, job_id: str, status: Status, ttl: int | None = None) -> None:
        key = self._key(job_id)
        ttl = ttl if ttl is not None else self._default_ttl
        record = StatusRecord(job_id=job_id, status=Status(status), ttl=ttl)
        payload = json.dumps(record.to_dict())

        try:
            if ttl is not None:
                await self._client.set(key, payload, ex=ttl)
            else:
                await self._client.set(key, payload)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StoreConnectionError(
                f"Redis unreachable while writing {key}",
                context=ErrorContext(job_id=job_id, key=key),
                cause=e,
            ) from e
        except RedisError as e:
            raise StoreWriteError(
                f"Redis rejected write to {key}: {e}",
                context=ErrorContext(job_id=job_id, key=key),
                cause=e,
            ) from e

        logger.debug("Stored status %s for %s (ttl=%s)", record.status.value, key, ttl)

    async def get(self, job_id: str) -> StatusRecord | None:
        """Read back the current record, or None when absent or expired."""
        key = self._key(job_id)
        try:
            raw = await self._client.get(key)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StoreConnectionError(
                f"Redis unreachable while reading {key}",
                context=ErrorContext(job_id=job_id, key=key),
                cause=e,
            ) from e
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return StatusRecord.from_dict(json.loads(raw))

    async def close(self) -> None:
        await self._client.aclose()


__all__ = [
    "RedisStatusStore",
    "REDIS_AVAILABLE",
]
