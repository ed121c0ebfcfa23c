"""Unit tests for the in-memory token-bucket rate limiter."""

import threading
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.token_bucket import InMemoryTokenBucketRateLimiter


def _limiter(capacity: int, window_ms: int, start: int = 0) -> tuple[InMemoryTokenBucketRateLimiter, Mock]:
    clock = Mock(return_value=start)
    return InMemoryTokenBucketRateLimiter(capacity=capacity, window_ms=window_ms, clock=clock), clock


def test_capacity_two_scenario() -> None:
    limiter, clock = _limiter(capacity=2, window_ms=1_000)

    first = limiter.check_rate_limit("k")
    second = limiter.check_rate_limit("k")
    third = limiter.check_rate_limit("k")

    assert (first.allowed, first.remaining) == (True, 1)
    assert (second.allowed, second.remaining) == (True, 0)
    assert (third.allowed, third.remaining) == (False, 0)

    clock.return_value = 1_000
    refilled = limiter.check_rate_limit("k")
    assert (refilled.allowed, refilled.remaining) == (True, 1)


def test_unseen_caller_starts_with_full_bucket() -> None:
    limiter, _ = _limiter(capacity=100, window_ms=60_000)

    result = limiter.check_rate_limit("new")

    assert result.allowed is True
    assert result.remaining == 99
    assert result.limit == 100


def test_tokens_never_exceed_capacity_after_long_idle() -> None:
    limiter, clock = _limiter(capacity=10, window_ms=1_000)

    limiter.check_rate_limit("k")
    clock.return_value = 10 * 1_000

    assert limiter.check_rate_limit("k").remaining == 9


def test_remaining_decreases_by_one_until_denied() -> None:
    limiter, _ = _limiter(capacity=5, window_ms=60_000)

    remaining = [limiter.check_rate_limit("k").remaining for _ in range(5)]
    assert remaining == [4, 3, 2, 1, 0]

    for _ in range(3):
        denied = limiter.check_rate_limit("k")
        assert denied.allowed is False
        assert denied.remaining == 0


def test_one_token_refills_after_its_share_of_the_window() -> None:
    limiter, clock = _limiter(capacity=4, window_ms=1_000)
    for _ in range(4):
        limiter.check_rate_limit("k")

    clock.return_value = 249
    assert limiter.check_rate_limit("k").allowed is False

    clock.return_value = 249 + 250
    result = limiter.check_rate_limit("k")
    assert result.allowed is True
    assert result.remaining == 0


def test_reset_at_is_now_plus_window() -> None:
    limiter, clock = _limiter(capacity=1, window_ms=1_000, start=5_000)

    assert limiter.check_rate_limit("k").reset_at == 6_000
    clock.return_value = 5_100
    denied = limiter.check_rate_limit("k")
    assert denied.reset_at == 6_100
    assert denied.retry_after_ms == 1_000


def test_reset_rate_limit_makes_caller_unseen() -> None:
    limiter, _ = _limiter(capacity=2, window_ms=60_000)
    limiter.check_rate_limit("k")
    limiter.check_rate_limit("k")
    assert limiter.check_rate_limit("k").allowed is False

    limiter.reset_rate_limit("k")

    assert limiter.check_rate_limit("k").remaining == 1


def test_reset_is_idempotent() -> None:
    limiter, _ = _limiter(capacity=2, window_ms=60_000)

    limiter.reset("never-seen")
    limiter.reset("never-seen")

    assert limiter.tracked_entries() == 0


def test_clock_going_backwards_does_not_refill_or_rewind() -> None:
    limiter, clock = _limiter(capacity=2, window_ms=1_000, start=10_000)
    limiter.check_rate_limit("k")
    limiter.check_rate_limit("k")

    clock.return_value = 9_000
    assert limiter.check_rate_limit("k").allowed is False

    # The backwards reading did not move the refill clock to 9_000.
    clock.return_value = 10_499
    assert limiter.check_rate_limit("k").allowed is False
    clock.return_value = 11_000
    assert limiter.check_rate_limit("k").allowed is True


def test_get_remaining_tokens_does_not_consume() -> None:
    limiter, clock = _limiter(capacity=3, window_ms=3_000)

    assert limiter.get_remaining_tokens("k") == 3
    limiter.check_rate_limit("k")
    assert limiter.get_remaining_tokens("k") == 2
    assert limiter.peek_remaining("k") == 2

    clock.return_value = 1_000
    assert limiter.get_remaining_tokens("k") == 3
    assert limiter.check_rate_limit("k").remaining == 2


def test_admit_matches_check_rate_limit() -> None:
    limiter, _ = _limiter(capacity=3, window_ms=1_000)

    assert limiter.admit("k").remaining == 2
    assert limiter.check_rate_limit("k").remaining == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"capacity": 0, "window_ms": 60_000},
        {"capacity": 10, "window_ms": 0},
    ],
)
def test_invalid_constructor_args(kwargs: dict) -> None:
    with pytest.raises(ValueError):
        InMemoryTokenBucketRateLimiter(**kwargs)


def test_concurrent_calls_admit_exactly_capacity() -> None:
    limiter, _ = _limiter(capacity=100, window_ms=60_000, start=5_000)
    allowed: list[bool] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(50):
            result = limiter.admit("shared")
            with lock:
                allowed.append(result.allowed)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(allowed) == 400
    assert sum(allowed) == 100
    assert limiter.get_remaining_tokens("shared") == 0


@pytest.mark.parametrize("key", [2.0, ("ip", "127.0.0.1"), None, False])
def test_non_string_non_integer_key_is_rejected(key) -> None:
    limiter, _ = _limiter(capacity=3, window_ms=3_000)

    with pytest.raises(TypeError):
        limiter.admit(key)
    assert limiter.tracked_entries() == 0


def test_clear_drops_every_bucket() -> None:
    limiter, _ = _limiter(capacity=1, window_ms=60_000)
    limiter.admit("a")
    limiter.admit(7)

    limiter.clear()

    assert limiter.tracked_entries() == 0
    assert limiter.admit("a").remaining == 0
    assert limiter.get_remaining_tokens(7) == 1
