"""In-memory token-bucket rate limiter.

Each caller owns a bucket of integer tokens that refills in proportion to
the time elapsed since the last refill, capped at ``capacity``. An allowed
request consumes one token.

Notes:
- Per-process only; buckets live until ``reset`` is called.
- The refill clock is moved to ``now`` on every call, so time worth less
  than one token is discarded instead of carried over.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass

from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    CallerId,
    Clock,
    RateLimitResult,
    normalize_key,
    wall_clock_ms,
)

DEFAULT_CAPACITY = 100
DEFAULT_WINDOW_MS = 60_000


@dataclass
class _BucketState:
    tokens: int
    last_refill: int


class InMemoryTokenBucketRateLimiter(AbstractRateLimiter):
    """Rate limiter giving every caller a refilling bucket of tokens.

    A full bucket holds ``capacity`` tokens and a drained bucket is fully
    refilled after ``window_ms``. Unseen callers start with a full bucket.
    """

    strategy = "token_bucket"

    def __init__(
        self,
        *,
        capacity: int = DEFAULT_CAPACITY,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Clock = wall_clock_ms,
    ) -> None:
        """Initialize the token-bucket limiter.

        Args:
            capacity: Maximum number of tokens per bucket.
            window_ms: Time in milliseconds to refill an empty bucket.
            clock: Time source returning UNIX time in milliseconds.

        Raises:
            ValueError: If capacity or window_ms are invalid.
        """
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        self._capacity = capacity
        self._window_ms = window_ms
        self._ms_per_token = window_ms / capacity
        self._clock = clock
        self._lock = threading.RLock()
        self._buckets: dict[str, _BucketState] = {}

    @property
    def limit(self) -> int:
        return self._capacity

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def _refill_locked(self, bucket: _BucketState, now: int) -> None:
        elapsed = max(0, now - bucket.last_refill)
        tokens_to_add = math.floor(elapsed / self._ms_per_token)
        bucket.tokens = min(self._capacity, bucket.tokens + tokens_to_add)
        # A clock stepping backwards must not move the refill time back.
        bucket.last_refill = max(bucket.last_refill, now)

    def check_rate_limit(self, key: CallerId) -> RateLimitResult:
        """Refill the caller's bucket, then try to take one token.

        Args:
            key: Caller identity.

        Returns:
            RateLimitResult; ``reset_at`` is always ``now + window_ms`` and is
            an upper-bound hint rather than the exact next-allowed time.
        """
        caller = normalize_key(key)
        now = self._clock()
        reset_at = now + self._window_ms

        with self._lock:
            bucket = self._buckets.get(caller)
            if bucket is None:
                bucket = _BucketState(tokens=self._capacity, last_refill=now)
                self._buckets[caller] = bucket

            self._refill_locked(bucket, now)

            if bucket.tokens > 0:
                bucket.tokens -= 1
                return RateLimitResult(
                    allowed=True,
                    limit=self._capacity,
                    remaining=bucket.tokens,
                    reset_at=reset_at,
                )

        return RateLimitResult(
            allowed=False,
            limit=self._capacity,
            remaining=0,
            reset_at=reset_at,
            retry_after_ms=math.ceil(self._ms_per_token),
        )

    def admit(self, key: CallerId) -> RateLimitResult:
        return self.check_rate_limit(key)

    def get_remaining_tokens(self, key: CallerId) -> int:
        """Return the tokens the caller could spend now, without consuming.

        The stored bucket is not modified.
        """
        caller = normalize_key(key)
        now = self._clock()
        with self._lock:
            bucket = self._buckets.get(caller)
            if bucket is None:
                return self._capacity
            elapsed = max(0, now - bucket.last_refill)
            return min(self._capacity, bucket.tokens + math.floor(elapsed / self._ms_per_token))

    def peek_remaining(self, key: CallerId) -> int:
        return self.get_remaining_tokens(key)

    def reset_rate_limit(self, key: CallerId) -> None:
        """Delete the caller's bucket (administrative override)."""
        with self._lock:
            self._buckets.pop(normalize_key(key), None)

    def reset(self, key: CallerId) -> None:
        self.reset_rate_limit(key)

    def clear(self) -> None:
        """Drop every bucket."""
        with self._lock:
            self._buckets.clear()

    def tracked_entries(self) -> int:
        """Return the number of buckets currently held."""
        with self._lock:
            return len(self._buckets)
