"""Tests for strategy selection in the rate limiter factory."""

import pytest
from pydantic import ValidationError

from app.adapters.rate_limit import (
    AbstractRateLimiter,
    InMemoryFixedWindowRateLimiter,
    InMemoryTokenBucketRateLimiter,
    create_rate_limiter,
)
from app.core.config import RateLimitSettings
from app.core.errors import ValidationAppError


def test_builds_fixed_window_limiter() -> None:
    limiter = create_rate_limiter(
        RateLimitSettings(strategy="fixed_window", requests=50, window_ms=60_000)
    )

    assert isinstance(limiter, InMemoryFixedWindowRateLimiter)
    assert limiter.strategy == "fixed_window"
    assert limiter.limit == 50
    assert limiter.window_ms == 60_000


def test_builds_token_bucket_limiter() -> None:
    limiter = create_rate_limiter(
        RateLimitSettings(strategy="token_bucket", requests=100, window_ms=60_000)
    )

    assert isinstance(limiter, InMemoryTokenBucketRateLimiter)
    assert limiter.limit == 100


def test_injected_clock_is_used() -> None:
    now = {"ms": 0}
    limiter = create_rate_limiter(
        RateLimitSettings(strategy="token_bucket", requests=1, window_ms=1_000),
        clock=lambda: now["ms"],
    )

    assert limiter.admit("k").allowed is True
    assert limiter.admit("k").allowed is False
    now["ms"] = 1_000
    assert limiter.admit("k").allowed is True


@pytest.mark.parametrize("strategy", ["fixed_window", "token_bucket"])
def test_strategies_share_the_interface(strategy: str) -> None:
    limiter = create_rate_limiter(
        RateLimitSettings(strategy=strategy, requests=2, window_ms=60_000),
        clock=lambda: 0,
    )

    assert isinstance(limiter, AbstractRateLimiter)
    decisions = [limiter.admit("caller") for _ in range(3)]
    assert [d.allowed for d in decisions] == [True, True, False]
    assert [d.remaining for d in decisions] == [1, 0, 0]

    limiter.reset("caller")
    assert limiter.admit("caller").allowed is True


def test_unknown_strategy_raises_validation_error() -> None:
    cfg = RateLimitSettings.model_construct(strategy="sliding_log", requests=10, window_ms=1_000)

    with pytest.raises(ValidationAppError) as exc_info:
        create_rate_limiter(cfg)

    assert exc_info.value.code == "rate_limit_unknown_strategy"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"requests": 0},
        {"window_ms": 0},
        {"strategy": "leaky_bucket"},
    ],
)
def test_invalid_settings_fail_at_startup(kwargs: dict) -> None:
    with pytest.raises(ValidationError):
        RateLimitSettings(**kwargs)
