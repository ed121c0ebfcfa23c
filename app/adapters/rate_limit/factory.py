"""Factory pattern for creating rate limiter instances."""

from app.adapters.rate_limit.base import AbstractRateLimiter, Clock, wall_clock_ms
from app.adapters.rate_limit.fixed_window import InMemoryFixedWindowRateLimiter
from app.adapters.rate_limit.token_bucket import InMemoryTokenBucketRateLimiter
from app.core.config import RateLimitSettings
from app.core.errors import ValidationAppError


def create_rate_limiter(
    rate_limit_settings: RateLimitSettings,
    *,
    clock: Clock = wall_clock_ms,
) -> AbstractRateLimiter:
    """Instantiate the limiter strategy selected by configuration.

    Args:
        rate_limit_settings: Resolved rate limit settings.
        clock: Time source in epoch milliseconds (tests inject a fake).

    Returns:
        AbstractRateLimiter: Configured limiter instance.

    Raises:
        ValidationAppError: If the strategy is unknown.
    """
    strategy = rate_limit_settings.strategy.lower()

    if strategy == "fixed_window":
        return InMemoryFixedWindowRateLimiter(
            limit=rate_limit_settings.requests,
            window_ms=rate_limit_settings.window_ms,
            clock=clock,
        )

    if strategy == "token_bucket":
        return InMemoryTokenBucketRateLimiter(
            capacity=rate_limit_settings.requests,
            window_ms=rate_limit_settings.window_ms,
            clock=clock,
        )

    raise ValidationAppError(
        code="rate_limit_unknown_strategy",
        message=(
            f"Unknown rate limit strategy: '{strategy}'. "
            "Supported strategies: fixed_window, token_bucket"
        ),
        details={"allowed_values": ["fixed_window", "token_bucket"]},
    )
