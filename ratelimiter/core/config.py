"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_store_settings() -> "StoreSettings":
    """Build counter store settings from environment."""

    return StoreSettings()


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment."""

    return AppSettings()


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()


class StoreSettings(BaseSettings):
    """Shared counter store configuration.

    The store holds the fixed-window counters for every service instance, so
    all instances must point at the same Redis deployment. The ``memory``
    backend keeps counters in-process and is only suitable for local runs.
    """

    backend: str = Field(
        "redis",
        description="Counter store backend: redis, redis_cluster or memory",
    )
    url: str = Field(
        "",
        description="Full connection URL; assembled from host/port when empty",
    )
    host: str = Field(
        "localhost",
        description="Store host name",
    )
    port: int = Field(
        6379,
        description="Store port",
        ge=1,
        le=65535,
    )
    password: SecretStr = Field(
        SecretStr(""),
        description="Store password (empty for no AUTH)",
    )
    ssl: bool = Field(
        False,
        description="Use TLS (rediss://) for the store connection",
    )
    socket_timeout_seconds: float = Field(
        2.0,
        description="Socket connect/read timeout for store calls",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="STORE_",
        case_sensitive=False,
    )

    @property
    def redis_url(self) -> str:
        """Return the configured URL, or assemble one from host/port."""
        if self.url:
            return self.url

        protocol = "rediss" if self.ssl else "redis"
        secret = self.password.get_secret_value()
        auth = f":{secret}@" if secret else ""
        return f"{protocol}://{auth}{self.host}:{self.port}/0"


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    rate_limit_enabled: bool = Field(
        True,
        description="Evaluate descriptors against the configured rules",
    )
    rate_limit_rules: str | None = Field(
        None,
        description="Inline JSON rule document (takes precedence over the file)",
    )
    rate_limit_rules_file: str | None = Field(
        None,
        description="Path to a JSON file holding the rate limit rules",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field(
        "INFO",
        description="Root log level",
    )
    format: str = Field(
        "json",
        description="Log format: json or plain",
    )
    output: str = Field(
        "stdout",
        description="Log destination: stdout or file",
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
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    store: StoreSettings = Field(default_factory=_build_store_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
