"""Session and admin-token authentication.

Design principles:
- Single Responsibility: token parsing/validation only; sessions live in
  ``SessionStore``
- Dependency Injection: used via FastAPI Depends() for loose coupling
- Testable: pure validation functions wrapped by thin async dependencies
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from app.core.dependencies import SessionStoreDep, SettingsDep
from app.core.errors import AuthenticationAppError, AuthorizationAppError
from app.core.security import constant_time_equals, hash_identifier
from app.stores.sessions import SessionInfo, SessionStore

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Examples:
        >>> parse_bearer_token("Bearer abc123")
        'abc123'
        >>> parse_bearer_token("Basic xyz") is None
        True
        >>> parse_bearer_token(None) is None
        True
    """
    if not authorization:
        return None

    value = authorization.strip()
    if not value.lower().startswith(BEARER_PREFIX):
        return None

    token = value[len(BEARER_PREFIX):].strip()
    return token or None


def validate_session_token(sessions: SessionStore, token: str | None) -> SessionInfo:
    """Resolve a session token or raise.

    Raises:
        AuthenticationAppError: If the token is missing, unknown or expired.
    """
    if not token:
        raise AuthenticationAppError(
            code="missing_session_token",
            message="Missing session token. Provide Authorization: Bearer <token>.",
        )

    session = sessions.validate_session(token)
    if session is None:
        logger.warning(
            "auth.invalid_session",
            extra={"token_hash": hash_identifier(token)},
        )
        raise AuthenticationAppError(
            code="invalid_session",
            message="Invalid or expired session token",
        )
    return session


def validate_admin_token(provided: str | None, expected: str | None) -> None:
    """Check a provided admin token against the configured one.

    Raises:
        AuthorizationAppError: If admin access is not configured or the token
            does not match.
    """
    if not expected:
        logger.error(
            "admin_token_validation_failed",
            extra={"reason": "admin_token_not_configured"},
        )
        raise AuthorizationAppError(
            code="admin_token_not_configured",
            message="Admin API is disabled because no admin token is configured",
            details={"hint": "Set APP_ADMIN_TOKEN to enable admin endpoints"},
        )

    if not provided or not constant_time_equals(provided, expected):
        logger.warning(
            "admin_token_validation_failed",
            extra={"reason": "invalid_admin_token", "token_present": bool(provided)},
        )
        raise AuthorizationAppError(
            code="invalid_admin_token",
            message="Invalid or missing admin token",
        )


async def require_session(
    sessions: SessionStoreDep,
    authorization: Annotated[str | None, Header()] = None,
) -> SessionInfo:
    """FastAPI dependency returning the caller's session.

    Raises:
        HTTPException: 401 Unauthorized if the session is missing or invalid.
    """
    try:
        session = validate_session_token(sessions, parse_bearer_token(authorization))
    except AuthenticationAppError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    logger.debug("auth.success", extra={"user_id": session.user_id})
    return session


async def optional_session(
    sessions: SessionStoreDep,
    authorization: Annotated[str | None, Header()] = None,
) -> SessionInfo | None:
    """Like ``require_session`` but yields None instead of failing."""
    token = parse_bearer_token(authorization)
    if not token:
        return None
    return sessions.validate_session(token)


async def verify_admin_token(
    config: SettingsDep,
    x_admin_token: Annotated[str | None, Header(alias="X-Admin-Token")] = None,
) -> None:
    """FastAPI dependency guarding admin endpoints.

    Raises:
        HTTPException: 403 Forbidden if the admin token is invalid.
    """
    try:
        validate_admin_token(x_admin_token, config.app.admin_token)
    except AuthorizationAppError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=exc.message,
        ) from exc


SessionDep = Annotated[SessionInfo, Depends(require_session)]
OptionalSessionDep = Annotated[SessionInfo | None, Depends(optional_session)]
