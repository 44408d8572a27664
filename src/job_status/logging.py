"""
Logging setup for job-status.

All modules log through ``logging.getLogger(__name__)`` under the
``job_status`` namespace. This module provides the formatters and a
``configure_logging`` helper driven by LoggingConfig.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from .config import LoggingConfig

ROOT_LOGGER = "job_status"


class JSONFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in ("job_id", "job_class", "status"):
            value = getattr(record, key, None)
            if value is not None:
                log_data[key] = value

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%H:%M:%S.%f")[:-3]
        color = self.LEVEL_COLORS.get(record.levelname, "") if self.color else ""
        reset = self.RESET if color else ""

        line = f"{timestamp} {color}{record.levelname:8}{reset} {record.name}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(config: LoggingConfig | None = None, stream: Any = None) -> logging.Logger:
    """Attach a single handler to the ``job_status`` logger.

    Calling it again replaces the handler installed by the previous call.
    """
    config = config or LoggingConfig()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, config.level.upper()))

    for handler in list(logger.handlers):
        if getattr(handler, "_job_status_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    if config.format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter(color=stream is None))
    handler._job_status_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger


__all__ = [
    "JSONFormatter",
    "TextFormatter",
    "configure_logging",
]
