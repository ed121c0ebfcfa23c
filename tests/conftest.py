"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests, so the
environment below is in place before ``app.core.config`` builds settings.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_ADMIN_TOKEN", "test-admin-token")
os.environ.setdefault("AUTH_PASSWORD_HASH_ITERATIONS", "1000")
os.environ.setdefault("RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("RATE_LIMIT_STRATEGY", "token_bucket")
os.environ.setdefault("RATE_LIMIT_REQUESTS", "100")
os.environ.setdefault("RATE_LIMIT_WINDOW_MS", "60000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.app_factory import create_app
from app.core.config import RateLimitSettings, Settings, settings
from app.core.container import AppContainer

STRONG_PASSWORD = "SecurePass123"
ADMIN_HEADERS = {"X-Admin-Token": "test-admin-token"}


class FakeClock:
    """Deterministic millisecond clock for limiters."""

    def __init__(self, start: int = 0) -> None:
        self.current = start

    def __call__(self) -> int:
        return self.current

    def advance(self, ms: int) -> None:
        self.current += ms


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock(start=1_000_000)


@pytest.fixture
def container(fake_clock: FakeClock) -> AppContainer:
    """Fresh stores per test, with a token bucket limiter on a fake clock."""
    return AppContainer.build(settings, limiter_clock=fake_clock)


@pytest.fixture
def app(container: AppContainer) -> FastAPI:
    return create_app(container, setup_logging=False)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


def rate_limit_config(
    strategy: str,
    requests: int,
    *,
    enabled: bool = True,
    include_headers: bool = True,
) -> Settings:
    """Copy of the test settings with a different rate limit section."""
    return settings.model_copy(
        update={
            "rate_limit": RateLimitSettings(
                enabled=enabled,
                strategy=strategy,
                requests=requests,
                window_ms=60_000,
                include_headers=include_headers,
            )
        }
    )


def build_app_with_limiter(
    strategy: str,
    requests: int,
    fake_clock: FakeClock,
    **overrides,
) -> FastAPI:
    """Build an app whose limiter uses the given strategy and budget."""
    config = rate_limit_config(strategy, requests, **overrides)
    return create_app(
        AppContainer.build(config, limiter_clock=fake_clock),
        config=config,
        setup_logging=False,
    )
