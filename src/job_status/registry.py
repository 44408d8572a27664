"""
Job class registry.

Processor payloads name job classes as strings. The registry maps those
names to types: explicitly registered names first, then dotted import
paths (``pkg.module.Class`` or ``pkg.module:Class``).
"""

from __future__ import annotations

import importlib
import threading
from typing import Any, Callable

from .errors import ErrorContext, JobResolutionError


class JobRegistry:
    """Name -> job class lookup.

    Registration is thread-safe; lookups of registered names are plain
    dict reads.
    """

    def __init__(self):
        self._classes: dict[str, type] = {}
        self._lock = threading.Lock()

    def register(self, cls: type | None = None, *, name: str | None = None) -> Any:
        """Register a job class under ``name`` (defaults to its qualified name).

        Works as a plain call or as a decorator:

            @registry.register
            class ExportJob(StatusWorker): ...

            @registry.register(name="export")
            class ExportJob(StatusWorker): ...
        """
        def decorator(target: type) -> type:
            key = name or f"{target.__module__}.{target.__qualname__}"
            with self._lock:
                self._classes[key] = target
                self._classes.setdefault(target.__qualname__, target)
            return target

        if cls is not None:
            return decorator(cls)
        return decorator

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._classes.pop(name, None) is not None

    def resolve(self, ref: Any) -> type:
        """Resolve a type or a class name to a type.

        Raises:
            JobResolutionError: If ``ref`` names nothing importable
        """
        if isinstance(ref, type):
            return ref
        if not isinstance(ref, str) or not ref:
            raise JobResolutionError(repr(ref))

        cls = self._classes.get(ref)
        if cls is not None:
            return cls
        return self._import(ref)

    def __contains__(self, name: str) -> bool:
        return name in self._classes

    def _import(self, path: str) -> type:
        if ":" in path:
            module_name, _, attr_path = path.partition(":")
        else:
            module_name, _, attr_path = path.rpartition(".")
        if not module_name or not attr_path:
            raise JobResolutionError(path, context=ErrorContext(job_class=path))

        try:
            obj: Any = importlib.import_module(module_name)
            for attr in attr_path.split("."):
                obj = getattr(obj, attr)
        except Exception as e:
            # relative names raise TypeError; broken modules raise anything on import
            raise JobResolutionError(path, context=ErrorContext(job_class=path), cause=e) from e

        if not isinstance(obj, type):
            raise JobResolutionError(path, context=ErrorContext(job_class=path))
        return obj


default_registry = JobRegistry()


def register_job(cls: type | None = None, *, name: str | None = None) -> Callable[[type], type] | type:
    """Register a job class in the default registry."""
    return default_registry.register(cls, name=name)


__all__ = [
    "JobRegistry",
    "default_registry",
    "register_job",
]
