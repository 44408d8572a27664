"""
Core types for job status tracking.

This module defines the Status enum, the StatusRecord persisted per
transition, the JobDescriptor handed in by the host processor, and the
FailureKind classification of an abnormal exit.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from .worker import JobStopped


class Status(str, Enum):
    """Job status values as stored for polling consumers.

    State transitions, per attempt:
    - WORKING (attempt started)
    - WORKING -> COMPLETE | STOPPED | INTERRUPTED | RETRYING | FAILED
    """
    WORKING = "working"
    COMPLETE = "complete"
    STOPPED = "stopped"
    INTERRUPTED = "interrupted"
    RETRYING = "retrying"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if this status ends the current attempt."""
        return self is not Status.WORKING


class FailureKind(str, Enum):
    """How a job attempt ended abnormally."""
    STOPPED = "stopped"
    INTERRUPTED = "interrupted"
    ERROR = "error"

    @classmethod
    def of(cls, exc: BaseException) -> FailureKind:
        """Classify an exception raised out of a job attempt."""
        if isinstance(exc, JobStopped):
            return cls.STOPPED
        if isinstance(exc, (SystemExit, KeyboardInterrupt, asyncio.CancelledError)):
            return cls.INTERRUPTED
        return cls.ERROR


@dataclass
class StatusRecord:
    """A single status write for a job."""
    job_id: str
    status: Status
    ttl: int | None = None
    updated_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "ttl": self.ttl,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StatusRecord:
        return cls(
            job_id=data["job_id"],
            status=Status(data["status"]),
            ttl=data.get("ttl"),
            updated_at=data.get("updated_at", time.time()),
        )


@dataclass(frozen=True)
class JobDescriptor:
    """Per-attempt job description supplied by the host processor.

    ``retry`` is None (no retries), a bool (retries on/off with the default
    cap) or an int (explicit cap). ``retry_count`` is None on the first
    attempt.
    """
    job_class: Any
    job_id: str
    args: tuple[Any, ...] = ()
    retry: bool | int | None = None
    retry_count: int | None = None
    queue: str | None = None

    @property
    def first_arg(self) -> Any:
        return self.args[0] if self.args else None

    @classmethod
    def from_message(cls, msg: Mapping[str, Any]) -> JobDescriptor:
        """Build a descriptor from a processor payload.

        Expected keys: ``class``, ``jid``, ``args``; optional ``retry``,
        ``retry_count`` and ``queue``.
        """
        return cls(
            job_class=msg["class"],
            job_id=msg["jid"],
            args=tuple(msg.get("args") or ()),
            retry=msg.get("retry"),
            retry_count=msg.get("retry_count"),
            queue=msg.get("queue"),
        )


__all__ = [
    "Status",
    "FailureKind",
    "StatusRecord",
    "JobDescriptor",
]
