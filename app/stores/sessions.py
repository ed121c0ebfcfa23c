"""In-memory session store for token-based authentication.

Tokens are opaque 64-character hex strings. Expired sessions are removed
lazily when they are looked up.
"""

from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from app.core.security import hash_identifier
from app.utils.formatting import utc_now

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


@dataclass(frozen=True)
class SessionInfo:
    user_id: int
    created_at: datetime
    expires_at: datetime


class SessionStore:
    """Thread-safe mapping of session tokens to ``SessionInfo``."""

    def __init__(
        self,
        *,
        ttl_seconds: int,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")

        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._lock = threading.RLock()
        self._sessions: dict[str, SessionInfo] = {}

    def create_session(self, user_id: int) -> str:
        """Open a session for ``user_id`` and return its token."""
        token = secrets.token_hex(TOKEN_BYTES)
        now = self._clock()
        with self._lock:
            self._sessions[token] = SessionInfo(
                user_id=user_id,
                created_at=now,
                expires_at=now + self._ttl,
            )

        logger.info(
            "session.created",
            extra={"user_id": user_id, "token_hash": hash_identifier(token)},
        )
        return token

    def validate_session(self, token: str) -> SessionInfo | None:
        """Return the session for ``token``, or None if unknown or expired."""
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None

            if self._clock() > session.expires_at:
                del self._sessions[token]
                logger.info(
                    "session.expired",
                    extra={"user_id": session.user_id, "token_hash": hash_identifier(token)},
                )
                return None

            return session

    def logout(self, token: str) -> bool:
        """Invalidate ``token``. Returns True if a session was removed."""
        with self._lock:
            removed = self._sessions.pop(token, None)

        if removed is not None:
            logger.info(
                "session.closed",
                extra={"user_id": removed.user_id, "token_hash": hash_identifier(token)},
            )
        return removed is not None

    def revoke_user_sessions(self, user_id: int) -> int:
        """Invalidate every session of a user; returns how many were removed."""
        with self._lock:
            tokens = [t for t, s in self._sessions.items() if s.user_id == user_id]
            for token in tokens:
                del self._sessions[token]
        return len(tokens)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
