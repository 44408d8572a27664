"""Status-tracking middleware for job execution.

This module provides the middleware a host job processor wraps around each
job attempt. For jobs that declare the status-tracking capability it writes
``working`` before the job runs and exactly one outcome status afterwards:

- ``complete``: the job returned normally
- ``stopped``: the job raised JobStopped (swallowed)
- ``interrupted``: SystemExit, KeyboardInterrupt or task cancellation (re-raised)
- ``retrying`` / ``failed``: any other exception (re-raised), depending on
  whether the processor will run the job again

Key design:
- JobMiddleware is an abstract base class
- MiddlewareChain composes middlewares around the job handler
- StatusMiddleware never retries anything; it only records why
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Awaitable, Callable

from .config import DEFAULT_MAX_RETRY_ATTEMPTS, RETRY_OFFSET, Settings
from .errors import JobResolutionError
from .registry import JobRegistry, default_registry
from .store import StatusStore
from .types import FailureKind, JobDescriptor, Status
from .worker import custom_job_id, tracks_status

Proceed = Callable[[], Awaitable[Any]]
JobHandler = Callable[[JobDescriptor], Awaitable[Any]]


class JobMiddleware(ABC):
    """Base class for job middleware.

    Middleware wraps a job attempt to add cross-cutting concerns.
    Call ``proceed()`` to continue the chain.
    """

    @abstractmethod
    async def __call__(self, descriptor: JobDescriptor, proceed: Proceed) -> None:
        """Execute middleware logic.

        Args:
            descriptor: The job attempt being executed.
            proceed: Runs the rest of the chain and the job itself.
        """
        ...


def _as_seconds(value: int | float | timedelta | None) -> int | None:
    if value is None:
        return None
    if isinstance(value, timedelta):
        value = value.total_seconds()
    return int(value)


class StatusMiddleware(JobMiddleware):
    """Records job status transitions in a StatusStore.

    Example:
        ```python
        store = RedisStatusStore.from_url("redis://localhost:6379/0")
        chain = MiddlewareChain()
        install_status_middleware(chain, store, expiration=60 * 30)
        ```
    """

    def __init__(
        self,
        store: StatusStore,
        *,
        expiration: int | timedelta | None = None,
        default_max_retry_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS,
        retry_offset: int = RETRY_OFFSET,
        registry: JobRegistry | None = None,
        logger: logging.Logger | None = None,
    ):
        self.store = store
        self.expiration = _as_seconds(expiration)
        self.default_max_retry_attempts = default_max_retry_attempts
        self.retry_offset = retry_offset
        self.registry = registry or default_registry
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_settings(
        cls,
        store: StatusStore,
        settings: Settings,
        **kwargs: Any,
    ) -> StatusMiddleware:
        """Create a middleware from the ``status`` section of ``settings``."""
        return cls(
            store,
            expiration=settings.status.expiration,
            default_max_retry_attempts=settings.status.default_max_retry_attempts,
            retry_offset=settings.status.retry_offset,
            **kwargs,
        )

    async def __call__(self, descriptor: JobDescriptor, proceed: Proceed) -> None:
        job_class = self.resolve_job_class(descriptor)

        if not tracks_status(job_class):
            await proceed()
            return

        expiry = self.expiry_for(job_class)
        job_id = self.job_id_for(job_class, descriptor)

        try:
            await self._store_status(job_id, Status.WORKING, expiry)
            await proceed()
            await self._store_status(job_id, Status.COMPLETE, expiry)
        except BaseException as exc:
            kind = FailureKind.of(exc)

            if kind is FailureKind.STOPPED:
                await self._store_status(job_id, Status.STOPPED, expiry)
                return

            if kind is FailureKind.INTERRUPTED:
                status = Status.INTERRUPTED
            else:
                status = self.classify_failure(descriptor)
                self.logger.log(
                    logging.INFO if status is Status.RETRYING else logging.WARNING,
                    "Job %s failed with %s: %s",
                    job_id, type(exc).__name__, status.value,
                    extra={"job_id": job_id, "status": status.value},
                )
            await self._store_status(job_id, status, expiry)
            raise

    # === Resolution ===

    def resolve_job_class(self, descriptor: JobDescriptor) -> type | None:
        """Determine the job's implementation type.

        A wrapper job names the real class in ``args[0]["job_class"]``; when
        that is absent or unresolvable the descriptor's own class is used.
        Returns None when neither resolves.
        """
        first = descriptor.first_arg
        wrapped = first.get("job_class") if isinstance(first, Mapping) else None

        if wrapped is not None:
            try:
                return self.registry.resolve(wrapped)
            except JobResolutionError as e:
                self.logger.warning(
                    "%s; falling back to %r", e, descriptor.job_class,
                    extra={"job_id": descriptor.job_id},
                )

        try:
            return self.registry.resolve(descriptor.job_class)
        except JobResolutionError as e:
            self.logger.warning(
                "%s; job %s runs untracked", e, descriptor.job_id,
                extra={"job_id": descriptor.job_id},
            )
            return None

    def expiry_for(self, job_class: type) -> int | None:
        """Per-class expiration override, else the configured default."""
        try:
            override = _as_seconds(job_class().expiration)
        except Exception:
            self.logger.debug(
                "Could not read expiration from %s; using default %s",
                job_class.__name__, self.expiration, exc_info=True,
            )
            return self.expiration
        if override is None or override <= 0:
            return self.expiration
        return override

    def job_id_for(self, job_class: type, descriptor: JobDescriptor) -> str:
        """Key for the job's status records."""
        hook = custom_job_id(job_class)
        if hook is None:
            return descriptor.job_id
        return hook(descriptor.job_id, descriptor.first_arg)

    # === Retry accounting ===

    def classify_failure(self, descriptor: JobDescriptor) -> Status:
        """``retrying`` if the processor will run the job again, else ``failed``."""
        if descriptor.retry:
            if self.retry_attempt_number(descriptor) < self.retry_attempts_from(descriptor.retry):
                return Status.RETRYING
        return Status.FAILED

    def retry_attempt_number(self, descriptor: JobDescriptor) -> int:
        if descriptor.retry_count is None:
            return 0
        return descriptor.retry_count + self.retry_offset

    def retry_attempts_from(self, retry: bool | int) -> int:
        # bool is an int subclass; True means "default cap", not a cap of 1
        if isinstance(retry, int) and not isinstance(retry, bool):
            return retry
        return self.default_max_retry_attempts

    async def _store_status(self, job_id: str, status: Status, expiry: int | None) -> None:
        self.logger.debug(
            "Job %s -> %s (ttl=%s)", job_id, status.value, expiry,
            extra={"job_id": job_id, "status": status.value},
        )
        await self.store.put(job_id, status, expiry)


class MiddlewareChain:
    """Composes middleware into an execution chain.

    Middleware is applied in order: first added = outermost wrapper.
    """

    def __init__(self, middlewares: list[JobMiddleware] | None = None):
        self._middlewares = list(middlewares or [])

    def add(self, middleware: JobMiddleware) -> "MiddlewareChain":
        """Add middleware to the chain. Returns self for chaining."""
        self._middlewares.append(middleware)
        return self

    def insert(self, index: int, middleware: JobMiddleware) -> "MiddlewareChain":
        """Insert middleware at ``index`` (0 = outermost)."""
        self._middlewares.insert(index, middleware)
        return self

    def __iter__(self):
        return iter(self._middlewares)

    def __len__(self) -> int:
        return len(self._middlewares)

    def build(self, handler: JobHandler) -> JobHandler:
        """Build the chain by wrapping the handler with all middleware."""
        result = handler
        for middleware in reversed(self._middlewares):
            captured = result
            captured_mw = middleware
            async def wrapped(descriptor: JobDescriptor, _mw=captured_mw, _next=captured):
                async def proceed():
                    return await _next(descriptor)
                return await _mw(descriptor, proceed)
            result = wrapped
        return result


def install_status_middleware(
    chain: MiddlewareChain,
    store: StatusStore,
    **options: Any,
) -> StatusMiddleware:
    """Add a StatusMiddleware to ``chain`` and return it.

    ``options`` are passed to StatusMiddleware, e.g. ``expiration=60 * 5``.
    """
    middleware = StatusMiddleware(store, **options)
    chain.add(middleware)
    return middleware


__all__ = [
    "Proceed",
    "JobHandler",
    "JobMiddleware",
    "StatusMiddleware",
    "MiddlewareChain",
    "install_status_middleware",
]
