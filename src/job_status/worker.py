"""
Status-tracking capability for job classes.

A job class opts in by setting the ``tracks_status`` class flag, either by
mixing in StatusWorker or with the @status_tracked decorator. Optional
per-class overrides:

- ``expiration``: instance attribute, TTL in seconds for this job's records
- ``status_job_id(dispatch_id, first_arg)``: classmethod returning the key
  status records are stored under
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

T = TypeVar("T", bound=type)


class JobStopped(Exception):
    """Raised by a job to stop itself gracefully.

    The status middleware records ``stopped`` and does not re-raise.
    """


class StatusWorker:
    """Mixin marking a job class as status tracked.

    Example:
        ```python
        class ExportJob(StatusWorker):
            expiration = 60 * 30

            async def perform(self, report_id):
                ...
        ```
    """
    tracks_status = True
    expiration: int | None = None


def status_tracked(
    cls: T | None = None,
    *,
    expiration: int | None = None,
) -> T | Callable[[T], T]:
    """Class decorator granting the status-tracking capability.

    Usable bare (``@status_tracked``) or with options
    (``@status_tracked(expiration=300)``).
    """
    def decorator(target: T) -> T:
        target.tracks_status = True
        if expiration is not None or not hasattr(target, "expiration"):
            target.expiration = expiration
        return target

    if cls is not None:
        return decorator(cls)
    return decorator


def tracks_status(job_class: Any) -> bool:
    """Return True if ``job_class`` declares the status-tracking capability."""
    return isinstance(job_class, type) and getattr(job_class, "tracks_status", False) is True


def custom_job_id(job_class: Any) -> Callable[[str, Any], str] | None:
    """Return the class's ``status_job_id`` hook, or None if it has none."""
    hook = getattr(job_class, "status_job_id", None)
    return hook if callable(hook) else None


__all__ = [
    "JobStopped",
    "StatusWorker",
    "status_tracked",
    "tracks_status",
    "custom_job_id",
]
