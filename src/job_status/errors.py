"""
Error taxonomy for job-status.

This module provides a small hierarchical exception system with:
- Error codes for programmatic handling
- Structured context for debugging
- Store errors wrapping the underlying client failure
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for job-status."""

    # Store errors (1xxx)
    STORE_ERROR = "ERR_1000"
    STORE_CONNECTION_ERROR = "ERR_1001"
    STORE_WRITE_ERROR = "ERR_1002"

    # Resolution errors (2xxx)
    RESOLUTION_ERROR = "ERR_2000"

    # Configuration errors (6xxx)
    CONFIG_ERROR = "ERR_6000"

    # Internal errors (9xxx)
    INTERNAL_ERROR = "ERR_9000"


@dataclass
class ErrorContext:
    """Structured context for error debugging."""

    job_id: str | None = None
    job_class: str | None = None
    key: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "job_class": self.job_class,
            "key": self.key,
            **self.extra,
        }


class JobStatusError(Exception):
    """
    Base exception for all job-status errors.

    Attributes:
        code: Standardized error code for programmatic handling
        message: Human-readable error message
        context: Structured debugging context
        cause: Original exception that caused this error
    """

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context = context or ErrorContext()
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.value}] {self.message}"]
        if self.context.job_id:
            parts.append(f"(job_id={self.context.job_id})")
        return " ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code.value,
            "message": self.message,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


# =============================================================================
# Store Errors
# =============================================================================


class StoreError(JobStatusError):
    """The status store could not persist a record."""

    code = ErrorCode.STORE_ERROR


class StoreConnectionError(StoreError):
    """The status store is unreachable."""

    code = ErrorCode.STORE_CONNECTION_ERROR

    def __init__(self, message: str = "Status store is unreachable", **kwargs):
        super().__init__(message, **kwargs)


class StoreWriteError(StoreError):
    """The status store rejected a write."""

    code = ErrorCode.STORE_WRITE_ERROR

    def __init__(self, message: str = "Status store write failed", **kwargs):
        super().__init__(message, **kwargs)


# =============================================================================
# Resolution / Config Errors
# =============================================================================


class JobResolutionError(JobStatusError):
    """A job class name could not be resolved to a type."""

    code = ErrorCode.RESOLUTION_ERROR

    def __init__(self, name: str, **kwargs):
        super().__init__(f"Cannot resolve job class: {name}", **kwargs)
        self.name = name


class ConfigError(JobStatusError):
    """Invalid configuration."""

    code = ErrorCode.CONFIG_ERROR


__all__ = [
    "ErrorCode",
    "ErrorContext",
    "JobStatusError",
    "StoreError",
    "StoreConnectionError",
    "StoreWriteError",
    "JobResolutionError",
    "ConfigError",
]
