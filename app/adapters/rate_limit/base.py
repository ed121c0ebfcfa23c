"""Rate limiter interfaces.

The API depends on this abstraction (not a concrete strategy) so the
fixed-window and token-bucket limiters are interchangeable, and a shared
backend (e.g., Redis) can be added later with minimal changes.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

CallerId = str | int
Clock = Callable[[], int]


def wall_clock_ms() -> int:
    """Return the current UNIX time in milliseconds."""
    return int(time.time() * 1000)


def normalize_key(key: CallerId) -> str:
    """Turn a caller identity into the string key used by the stores.

    Raises:
        TypeError: If the key is neither a string nor an integer.
        ValueError: If the key is an empty string.
    """
    if isinstance(key, bool) or not isinstance(key, (str, int)):
        raise TypeError(f"key must be a string or an integer, got {type(key).__name__}")

    normalized = str(key) if isinstance(key, int) else key
    if not normalized:
        raise ValueError("key must be a non-empty string or an integer")
    return normalized


@dataclass(frozen=True)
class RateLimitResult:
    """Admission decision returned by a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window (or bucket capacity).
        remaining: Remaining budget after this call (0 when blocked).
        reset_at: UNIX epoch milliseconds hint for when budget is restored.
        retry_after_ms: Suggested wait time in milliseconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_ms: int | None = None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    strategy: str = "abstract"

    @abstractmethod
    def admit(self, key: CallerId) -> RateLimitResult:
        """Check and consume budget for a caller in a single atomic step.

        Args:
            key: Caller identity (e.g., user id, IP address).

        Returns:
            RateLimitResult describing whether the request was allowed.
        """
        raise NotImplementedError

    @abstractmethod
    def reset(self, key: CallerId) -> None:
        """Forget all state for a caller. No-op when the caller is unseen."""
        raise NotImplementedError

    @abstractmethod
    def peek_remaining(self, key: CallerId) -> int:
        """Return the budget the caller has left right now, without consuming."""
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        """Forget every caller at once (application shutdown, tests)."""
        raise NotImplementedError

    @abstractmethod
    def tracked_entries(self) -> int:
        """Number of state entries currently held in memory."""
        raise NotImplementedError

    @property
    @abstractmethod
    def limit(self) -> int:
        """Requests per window (fixed window) or bucket capacity."""
        raise NotImplementedError

    @property
    @abstractmethod
    def window_ms(self) -> int:
        raise NotImplementedError


def user_caller_key(user_id: int) -> str:
    """Limiter key for an authenticated user."""
    return f"user:{user_id}"


def ip_caller_key(host: str | None) -> str:
    """Limiter key for an anonymous client address."""
    return f"ip:{host or 'unknown'}"
