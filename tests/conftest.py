"""
Shared test fixtures for job-status tests.

This module provides:
- Sample job classes (tracked, untracked, with overrides)
- In-memory store and middleware fixtures
- A descriptor factory and recording proceed callables
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest

from job_status import (
    InMemoryStatusStore,
    JobDescriptor,
    JobRegistry,
    StatusMiddleware,
    StatusWorker,
)

# =============================================================================
# Sample Job Classes
# =============================================================================


class TrackedJob(StatusWorker):
    """Plain tracked job with no overrides."""


class UntrackedJob:
    """Job that never opted in."""


class ExpiringJob(StatusWorker):
    """Tracked job with its own expiration."""
    expiration = 600


class BatchJob(StatusWorker):
    """Tracked job keyed by the batch id in its first argument."""

    @classmethod
    def status_job_id(cls, dispatch_id: str, first_arg: Any) -> str:
        return f"batch-{first_arg['batch_id']}"


class NeedsArgsJob(StatusWorker):
    """Tracked job that cannot be built without arguments."""
    expiration = 42

    def __init__(self, required):
        self.required = required


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def registry() -> JobRegistry:
    reg = JobRegistry()
    for cls in (TrackedJob, UntrackedJob, ExpiringJob, BatchJob, NeedsArgsJob):
        reg.register(cls, name=cls.__name__)
    return reg


@pytest.fixture
def store() -> InMemoryStatusStore:
    return InMemoryStatusStore()


@pytest.fixture
def middleware(store, registry) -> StatusMiddleware:
    return StatusMiddleware(store, expiration=300, registry=registry)


@pytest.fixture
def make_descriptor():
    """Factory for JobDescriptor with test defaults."""
    def _make(job_class: Any = "TrackedJob", **kwargs: Any) -> JobDescriptor:
        kwargs.setdefault("job_id", "jid-1")
        return JobDescriptor(job_class=job_class, **kwargs)
    return _make


@pytest.fixture
def proceed() -> AsyncMock:
    """A proceed callable that succeeds."""
    return AsyncMock(return_value=None)


def raising(exc: BaseException) -> AsyncMock:
    """A proceed callable that raises ``exc``."""
    return AsyncMock(side_effect=exc)


def statuses(store: InMemoryStatusStore) -> list[str]:
    return [record.status.value for record in store.history]
