"""
Job status tracking for background job processors.

This package provides:
- StatusMiddleware: records each job attempt's status around its execution
- StatusStore: write interface, with in-memory and Redis implementations
- StatusWorker / status_tracked: the opt-in capability for job classes
"""

from .config import (
    DEFAULT_MAX_RETRY_ATTEMPTS,
    RETRY_OFFSET,
    LoggingConfig,
    RedisConfig,
    Settings,
    StatusConfig,
    configure,
    get_settings,
    load_env,
)
from .errors import (
    ConfigError,
    ErrorCode,
    ErrorContext,
    JobResolutionError,
    JobStatusError,
    StoreConnectionError,
    StoreError,
    StoreWriteError,
)
from .logging import configure_logging
from .middleware import (
    JobMiddleware,
    MiddlewareChain,
    StatusMiddleware,
    install_status_middleware,
)
from .registry import JobRegistry, default_registry, register_job
from .store import InMemoryStatusStore, StatusStore
from .types import FailureKind, JobDescriptor, Status, StatusRecord
from .worker import JobStopped, StatusWorker, status_tracked, tracks_status

__all__ = [
    # Core
    "StatusMiddleware",
    "JobMiddleware",
    "MiddlewareChain",
    "install_status_middleware",
    # Types
    "Status",
    "StatusRecord",
    "JobDescriptor",
    "FailureKind",
    # Worker capability
    "JobStopped",
    "StatusWorker",
    "status_tracked",
    "tracks_status",
    # Registry
    "JobRegistry",
    "default_registry",
    "register_job",
    # Stores
    "StatusStore",
    "InMemoryStatusStore",
    # Config
    "RETRY_OFFSET",
    "DEFAULT_MAX_RETRY_ATTEMPTS",
    "StatusConfig",
    "RedisConfig",
    "LoggingConfig",
    "Settings",
    "get_settings",
    "configure",
    "load_env",
    "configure_logging",
    # Errors
    "ErrorCode",
    "ErrorContext",
    "JobStatusError",
    "StoreError",
    "StoreConnectionError",
    "StoreWriteError",
    "JobResolutionError",
    "ConfigError",
]
