"""
Configuration system for job-status.

This module provides typed configuration classes with:
- Dataclass-based settings with validation
- Environment variable loading
- YAML/TOML file loading
- Sensible defaults with override capability
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError


# Attempt numbers run one ahead of the processor's retry_count in current
# processor generations; older generations counted from zero.
RETRY_OFFSET = 1

DEFAULT_MAX_RETRY_ATTEMPTS = 25


# =============================================================================
# Status Configuration
# =============================================================================

@dataclass
class StatusConfig:
    """Configuration for the status middleware."""

    # Default TTL in seconds for status records; None = store default
    expiration: Optional[int] = None

    # Retry accounting
    default_max_retry_attempts: int = DEFAULT_MAX_RETRY_ATTEMPTS
    retry_offset: int = RETRY_OFFSET

    def __post_init__(self):
        if self.expiration is not None and self.expiration <= 0:
            raise ConfigError("expiration must be positive")
        if self.default_max_retry_attempts < 0:
            raise ConfigError("default_max_retry_attempts cannot be negative")
        if self.retry_offset not in (0, 1):
            raise ConfigError("retry_offset must be 0 or 1")


# =============================================================================
# Redis Configuration
# =============================================================================

@dataclass
class RedisConfig:
    """Configuration for the Redis status store."""

    url: str = field(
        default_factory=lambda: os.getenv(
            "REDIS_URL",
            "redis://localhost:6379/0"
        )
    )
    key_prefix: str = "job_status"


# =============================================================================
# Logging Configuration
# =============================================================================

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["text", "json"]


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: LogLevel = "INFO"
    format: LogFormat = "text"


# =============================================================================
# Master Configuration
# =============================================================================

@dataclass
class Settings:
    """
    Master configuration for job-status.

    Aggregates all configuration sections into a single object that can be
    loaded from environment variables, files, or constructed
    programmatically.
    """

    status: StatusConfig = field(default_factory=StatusConfig)
    redis: RedisConfig = field(default_factory=RedisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, prefix: str = "JOB_STATUS_") -> "Settings":
        """
        Load settings from environment variables.

        Example:
            JOB_STATUS_EXPIRATION=1800
            JOB_STATUS_MAX_RETRY_ATTEMPTS=10
            JOB_STATUS_REDIS_URL=redis://cache:6379/2
            JOB_STATUS_LOG_LEVEL=debug
        """
        settings = cls()

        # Status settings
        status_overrides: Dict[str, int] = {}
        try:
            if expiration := os.getenv(f"{prefix}EXPIRATION"):
                status_overrides["expiration"] = int(expiration)
            if max_attempts := os.getenv(f"{prefix}MAX_RETRY_ATTEMPTS"):
                status_overrides["default_max_retry_attempts"] = int(max_attempts)
            if offset := os.getenv(f"{prefix}RETRY_OFFSET"):
                status_overrides["retry_offset"] = int(offset)
        except ValueError as e:
            raise ConfigError(f"Invalid {prefix}* integer setting: {e}", cause=e) from e
        if status_overrides:
            settings.status = StatusConfig(**status_overrides)

        # Redis settings
        if url := os.getenv(f"{prefix}REDIS_URL"):
            settings.redis.url = url
        if key_prefix := os.getenv(f"{prefix}KEY_PREFIX"):
            settings.redis.key_prefix = key_prefix

        # Logging settings
        if level := os.getenv(f"{prefix}LOG_LEVEL"):
            settings.logging.level = level.upper()  # type: ignore
        if log_format := os.getenv(f"{prefix}LOG_FORMAT"):
            settings.logging.format = log_format.lower()  # type: ignore

        return settings

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Settings":
        """
        Load settings from a YAML or TOML file.

        Args:
            path: Path to configuration file (.yaml, .yml, or .toml)

        Returns:
            Settings object with values from file
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            try:
                import yaml
            except ImportError:
                raise ImportError("PyYAML is required for YAML config files: pip install pyyaml")
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            import tomllib
            with open(path, "rb") as f:
                data = tomllib.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {suffix}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create Settings from ``[status]``, ``[redis]`` and ``[logging]`` tables.

        Unknown keys are rejected so a typo cannot silently fall back to a default.
        """
        sections = {}
        for name, section_cls in (("status", StatusConfig), ("redis", RedisConfig), ("logging", LoggingConfig)):
            values = data.get(name) or {}
            known = {f.name for f in fields(section_cls)}
            if unknown := sorted(set(values) - known):
                raise ConfigError(f"Unknown [{name}] settings: {', '.join(unknown)}")
            sections[name] = section_cls(**values)
        return cls(**sections)

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return asdict(self)


# =============================================================================
# Global Settings & Helpers
# =============================================================================

_global_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, creating with defaults if needed."""
    global _global_settings
    if _global_settings is None:
        _global_settings = Settings.from_env()
    return _global_settings


def configure(settings: Settings) -> Settings:
    """Install ``settings`` as the global settings and return them."""
    global _global_settings
    _global_settings = settings
    return settings


def load_env(path: Optional[str] = None, *, override: bool = False) -> bool:
    """
    Load environment variables from a .env file.

    Args:
        path: Optional path to a .env file. If not provided, uses find_dotenv().
        override: Whether to override existing environment variables.

    Returns:
        True if a .env file was found and loaded, False otherwise.
    """
    env_path = path or find_dotenv(usecwd=True)
    if not env_path:
        return False
    return load_dotenv(env_path, override=override)


__all__ = [
    "RETRY_OFFSET",
    "DEFAULT_MAX_RETRY_ATTEMPTS",
    "StatusConfig",
    "RedisConfig",
    "LoggingConfig",
    "Settings",
    "get_settings",
    "configure",
    "load_env",
]
