"""Rate limiting adapters.

Two in-memory strategies (fixed window and token bucket) share one
interface so the application can pick either at startup, and later move to a
shared store without changing the API layer.
"""

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.rate_limit.factory import create_rate_limiter
from app.adapters.rate_limit.fixed_window import InMemoryFixedWindowRateLimiter
from app.adapters.rate_limit.token_bucket import InMemoryTokenBucketRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "InMemoryFixedWindowRateLimiter",
    "InMemoryTokenBucketRateLimiter",
    "RateLimitResult",
    "create_rate_limiter",
]
