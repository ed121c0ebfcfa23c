"""Rate limiting dependency for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: API routes depend on a dependency function only.
- Swap-friendly: the strategy (fixed window or token bucket) is chosen when
  the container is built; this module only sees the abstract interface.
- Per-caller keys: authenticated users are limited by user id, anonymous
  callers by client IP.
"""

from __future__ import annotations

import logging
import math

from fastapi import HTTPException, Request, status

from app.adapters.rate_limit.base import RateLimitResult, ip_caller_key, user_caller_key
from app.core.auth import OptionalSessionDep
from app.core.dependencies import RateLimiterDep, SettingsDep
from app.core.security import hash_identifier

logger = logging.getLogger(__name__)


def build_rate_limit_key(request: Request, user_id: int | None) -> str:
    """Build the limiter key for the current request.

    Args:
        request: FastAPI request.
        user_id: Authenticated user id, if any.

    Returns:
        str: Namespaced limiter key.
    """
    if user_id is not None:
        return user_caller_key(user_id)

    return ip_caller_key(request.client.host if request.client else None)


def build_rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Translate an admission decision into throttling response headers."""
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        # Epoch seconds, as clients conventionally expect.
        "X-RateLimit-Reset": str(result.reset_at // 1000),
    }
    if result.retry_after_ms is not None:
        headers["Retry-After"] = str(max(1, math.ceil(result.retry_after_ms / 1000)))
    return headers


async def enforce_rate_limit(
    request: Request,
    limiter: RateLimiterDep,
    session: OptionalSessionDep,
    config: SettingsDep,
) -> None:
    """FastAPI dependency enforcing rate limits.

    When enabled, admits one request against the caller's budget. If the
    caller is over budget, raises HTTP 429.

    Raises:
        HTTPException: 429 Too Many Requests when rate limit is exceeded.
    """
    if not config.rate_limit.enabled:
        return

    key = build_rate_limit_key(request, session.user_id if session else None)
    key_type = "user" if session else "ip"

    result = limiter.admit(key)
    if result.allowed:
        logger.info(
            "rate_limit.allowed",
            extra={
                "key_type": key_type,
                "key_hash": hash_identifier(key),
                "strategy": limiter.strategy,
                "limit": result.limit,
                "remaining": result.remaining,
            },
        )
        return

    logger.warning(
        "rate_limit.exceeded",
        extra={
            "key_type": key_type,
            "key_hash": hash_identifier(key),
            "strategy": limiter.strategy,
            "limit": result.limit,
            "remaining": result.remaining,
            "retry_after_ms": result.retry_after_ms,
        },
    )

    headers = build_rate_limit_headers(result) if config.rate_limit.include_headers else None

    raise HTTPException(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        detail="Rate limit exceeded. Try again later.",
        headers=headers,
    )
