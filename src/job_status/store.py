"""
Status store implementations.

This module provides the StatusStore interface the middleware writes
through, and an in-memory implementation.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable

from .types import Status, StatusRecord


class StatusStore(ABC):
    """Write interface for job status records.

    Each ``put`` fully replaces the previous record for ``job_id``.
    Implementations must be safe for concurrent use.
    """

    @abstractmethod
    async def put(self, job_id: str, status: Status, ttl: int | None = None) -> None:
        """Persist ``status`` for ``job_id``, expiring after ``ttl`` seconds.

        A ``ttl`` of None leaves expiry to the store's default policy.

        Raises:
            StoreError: If the underlying persistence is unreachable
        """
        ...


class InMemoryStatusStore(StatusStore):
    """In-memory status store.

    Suitable for testing and single-process use. Expired records are purged
    on every write and ``history`` keeps only the most recent
    ``history_limit`` writes.
    Thread-safe via asyncio.Lock.
    """

    def __init__(
        self,
        default_ttl: int | None = None,
        clock: Callable[[], float] = time.time,
        history_limit: int = 1000,
    ):
        self._records: dict[str, tuple[StatusRecord, float | None]] = {}
        self._history: deque[StatusRecord] = deque(maxlen=history_limit)
        self._default_ttl = default_ttl
        self._clock = clock
        self._lock = asyncio.Lock()

    async def put(self, job_id: str, status: Status, ttl: int | None = None) -> None:
        async with self._lock:
            now = self._clock()
            self._purge_expired(now)
            ttl = ttl if ttl is not None else self._default_ttl
            record = StatusRecord(job_id=job_id, status=Status(status), ttl=ttl, updated_at=now)
            expires_at = now + ttl if ttl is not None else None
            self._records[job_id] = (record, expires_at)
            self._history.append(record)

    async def get(self, job_id: str) -> StatusRecord | None:
        """Get the live record for ``job_id``, or None if absent or expired."""
        async with self._lock:
            entry = self._records.get(job_id)
            if entry is None:
                return None
            record, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._records[job_id]
                return None
            return record

    def __len__(self) -> int:
        return len(self._records)

    @property
    def history(self) -> list[StatusRecord]:
        """Recent writes in order, including replaced and expired ones."""
        return list(self._history)

    def clear(self) -> None:
        self._records.clear()
        self._history.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [
            job_id for job_id, (_, expires_at) in self._records.items()
            if expires_at is not None and now >= expires_at
        ]
        for job_id in expired:
            del self._records[job_id]


__all__ = [
    "StatusStore",
    "InMemoryStatusStore",
]
