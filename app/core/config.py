"""Application configuration using Pydantic Settings.

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


RateLimitStrategy = Literal["fixed_window", "token_bucket"]


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    name: str = Field(
        "Demo Backend API",
        description="Service name used in OpenAPI metadata",
    )
    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    post_min_title_chars: int = Field(
        3,
        description="Minimum post title length",
        ge=1,
    )
    post_min_publish_chars: int = Field(
        10,
        description="Minimum post content length required to publish",
        ge=0,
    )
    admin_token: str | None = Field(
        None,
        description="Static token for admin endpoints (X-Admin-Token); admin API disabled when unset",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Rate limiter configuration.

    Values are read once at startup; the limiter built from them is not
    reconfigured at runtime.
    """

    enabled: bool = Field(
        True,
        description="Enable per-caller rate limiting",
    )
    strategy: RateLimitStrategy = Field(
        "token_bucket",
        description="Limiter strategy: fixed_window or token_bucket",
    )
    requests: int = Field(
        100,
        description="Requests per window (fixed_window limit or token_bucket capacity)",
        ge=1,
    )
    window_ms: int = Field(
        60_000,
        description="Window size in milliseconds",
        ge=1,
    )
    include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class AuthSettings(BaseSettings):
    """Session and password policy configuration."""

    session_ttl_seconds: int = Field(
        24 * 60 * 60,
        description="Session lifetime in seconds",
        ge=1,
    )
    min_password_chars: int = Field(
        12,
        description="Minimum password length",
        ge=1,
    )
    password_hash_iterations: int = Field(
        120_000,
        description="PBKDF2 iterations used when hashing passwords",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field("json", description="Log line format")
    output: Literal["stdout", "file"] = Field("stdout", description="Log destination")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Number of rotated files to keep", ge=0)
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
    app: AppSettings = Field(default_factory=AppSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
settings = Settings()
