"""Unit tests for the in-memory session store."""

from datetime import datetime, timedelta, timezone

import pytest

from app.stores.sessions import SessionStore


class MutableClock:
    def __init__(self) -> None:
        self.current = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.current


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def sessions(clock: MutableClock) -> SessionStore:
    return SessionStore(ttl_seconds=60, clock=clock)


def test_tokens_are_unique_hex(sessions: SessionStore) -> None:
    tokens = {sessions.create_session(1) for _ in range(20)}

    assert len(tokens) == 20
    for token in tokens:
        assert len(token) == 64
        int(token, 16)


def test_validate_returns_session_info(sessions: SessionStore, clock: MutableClock) -> None:
    token = sessions.create_session(5)

    session = sessions.validate_session(token)

    assert session.user_id == 5
    assert session.created_at == clock.current
    assert session.expires_at == clock.current + timedelta(seconds=60)


def test_session_valid_until_expiry_instant(sessions: SessionStore, clock: MutableClock) -> None:
    token = sessions.create_session(5)

    clock.current += timedelta(seconds=60)
    assert sessions.validate_session(token) is not None

    clock.current += timedelta(seconds=1)
    assert sessions.validate_session(token) is None
    # Expired sessions are dropped, so going back in time does not revive them.
    clock.current -= timedelta(seconds=30)
    assert sessions.validate_session(token) is None


def test_logout(sessions: SessionStore) -> None:
    token = sessions.create_session(5)

    assert sessions.logout(token) is True
    assert sessions.logout(token) is False
    assert sessions.validate_session(token) is None


def test_revoke_user_sessions(sessions: SessionStore) -> None:
    a1 = sessions.create_session(1)
    a2 = sessions.create_session(1)
    b = sessions.create_session(2)

    assert sessions.revoke_user_sessions(1) == 2
    assert sessions.validate_session(a1) is None
    assert sessions.validate_session(a2) is None
    assert sessions.validate_session(b).user_id == 2


def test_rejects_non_positive_ttl() -> None:
    with pytest.raises(ValueError):
        SessionStore(ttl_seconds=0)
