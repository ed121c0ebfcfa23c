"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Windows are aligned to the epoch, not sliding.
- Stale windows are swept on every admitted call; see ``evict_stale``.
"""

from __future__ import annotations

import logging
import threading

from app.adapters.rate_limit.base import (
    AbstractRateLimiter,
    CallerId,
    Clock,
    RateLimitResult,
    normalize_key,
    wall_clock_ms,
)

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
DEFAULT_WINDOW_MS = 60_000

# Entries older than this many windows are dropped by the sweep.
RETENTION_WINDOWS = 2


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter counting requests per (caller, window) pair.

    Each caller may make ``limit`` requests inside one window; the next
    window starts from zero. Counters for old windows are kept until the
    sweep removes them, so ``get_request_count`` only ever reports the
    current window.

    Important:
        The sweep scans every tracked entry, which is O(entries) per admitted
        call. Entries are bounded by active callers times the retention
        windows, which is acceptable for a single process.
    """

    strategy = "fixed_window"

    def __init__(
        self,
        *,
        limit: int = DEFAULT_LIMIT,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Clock = wall_clock_ms,
    ) -> None:
        """Initialize the fixed-window limiter.

        Args:
            limit: Maximum number of allowed requests per window.
            window_ms: Size of the fixed window in milliseconds.
            clock: Time source returning UNIX time in milliseconds.

        Raises:
            ValueError: If limit or window_ms are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        self._limit = limit
        self._window_ms = window_ms
        self._clock = clock
        self._lock = threading.RLock()
        self._counts: dict[tuple[str, int], int] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def _window_start(self, now: int) -> int:
        return (now // self._window_ms) * self._window_ms

    def check_rate_limit(self, key: CallerId) -> bool:
        """Count a request for the caller if budget remains in this window.

        Args:
            key: Caller identity.

        Returns:
            True if the request is allowed, False once the window is full.
        """
        return self._check(normalize_key(key), self._clock())[0]

    def _check(self, caller: str, now: int) -> tuple[bool, int, int]:
        """Run one admission step.

        Returns:
            Tuple of (allowed, count_after_call, window_start).
        """
        window_start = self._window_start(now)
        window_key = (caller, window_start)

        with self._lock:
            count = self._counts.get(window_key, 0)
            if count >= self._limit:
                return False, count, window_start

            count += 1
            self._counts[window_key] = count
            self._evict_stale_locked(now)
            return True, count, window_start

    def admit(self, key: CallerId) -> RateLimitResult:
        """Adapt ``check_rate_limit`` to the shared admission decision shape."""
        now = self._clock()
        allowed, count, window_start = self._check(normalize_key(key), now)
        reset_at = window_start + self._window_ms

        return RateLimitResult(
            allowed=allowed,
            limit=self._limit,
            remaining=max(0, self._limit - count),
            reset_at=reset_at,
            retry_after_ms=None if allowed else max(0, reset_at - now),
        )

    def get_request_count(self, key: CallerId) -> int:
        """Return the caller's count in the current window (0 if none)."""
        caller = normalize_key(key)
        window_start = self._window_start(self._clock())
        with self._lock:
            return self._counts.get((caller, window_start), 0)

    def peek_remaining(self, key: CallerId) -> int:
        return max(0, self._limit - self.get_request_count(key))

    def evict_stale(self, now: int | None = None) -> int:
        """Drop counters for windows older than the retention threshold.

        Args:
            now: Reference time in milliseconds (defaults to the clock).

        Returns:
            Number of entries removed.
        """
        with self._lock:
            return self._evict_stale_locked(self._clock() if now is None else now)

    def _evict_stale_locked(self, now: int) -> int:
        cutoff = now - RETENTION_WINDOWS * self._window_ms
        stale = [key for key in self._counts if key[1] < cutoff]
        for key in stale:
            del self._counts[key]

        if stale:
            logger.debug(
                "rate_limit.evicted",
                extra={"strategy": self.strategy, "evicted": len(stale), "tracked": len(self._counts)},
            )
        return len(stale)

    def reset(self, key: CallerId) -> None:
        """Remove every window counter held for the caller."""
        caller = normalize_key(key)
        with self._lock:
            for window_key in [k for k in self._counts if k[0] == caller]:
                del self._counts[window_key]

    def clear(self) -> None:
        with self._lock:
            self._counts.clear()

    def tracked_entries(self) -> int:
        """Return the number of live (caller, window) counters."""
        with self._lock:
            return len(self._counts)
