"""Throttler configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ first
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_throttler_settings() -> "ThrottlerSettings":
    """Build throttler settings from environment."""

    return ThrottlerSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    """Build log settings from environment."""

    return LogSettings()  # type: ignore[call-arg]


class ThrottlerSettings(BaseSettings):
    """Counter store selection and store-failure policy.

    failure_policy controls what the dispatcher does when the store is
    unreachable: open runs the job, closed defers it for one full period,
    raise propagates the error to the job framework.
    """

    storage: Literal["memory", "redis"] = Field(
        "memory",
        description="Counter store backend (memory: single process, redis: shared)",
    )
    redis_url: str | None = Field(
        None,
        description="Redis connection URL, required when storage=redis",
    )
    redis_socket_timeout_seconds: float = Field(
        2.0,
        description="Upper bound for a single Redis round trip",
        gt=0,
    )
    redis_connect_timeout_seconds: float = Field(
        2.0,
        description="Upper bound for establishing a Redis connection",
        gt=0,
    )
    key_prefix: str = Field(
        "throttler",
        description="Namespace prepended to every limiter key",
        min_length=1,
    )
    failure_policy: Literal["open", "closed", "raise"] = Field(
        "open",
        description="What to do when the counter store is unavailable",
    )

    model_config = SettingsConfigDict(
        env_prefix="THROTTLER_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field(
        "json",
        description="Log line format",
    )
    output: Literal["stdout", "file"] = Field(
        "stdout",
        description="Log destination",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output=file",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(
        5,
        description="Number of rotated log files to keep",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    throttler: ThrottlerSettings = Field(default_factory=_build_throttler_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


settings = Settings()
