from __future__ import annotations

from fastapi import APIRouter, Depends, Header

from app.core.auth import SessionDep, parse_bearer_token
from app.core.dependencies import SessionStoreDep, UserStoreDep
from app.core.errors import AuthenticationAppError
from app.core.rate_limit import enforce_rate_limit
from app.schemas.auth import LoginRequest, LoginResponse, LogoutResponse, SessionResponse
from app.stores.sessions import SessionInfo

router = APIRouter(prefix="/auth", tags=["Auth"], dependencies=[Depends(enforce_rate_limit)])


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, users: UserStoreDep, sessions: SessionStoreDep) -> LoginResponse:
    """Exchange email and password for a session token.

    Raises:
        AuthenticationAppError: 401 on unknown email, wrong password or an
            inactive account (indistinguishable to the caller).
    """
    user = users.verify_credentials(payload.email, payload.password)
    if user is None:
        raise AuthenticationAppError(
            code="invalid_credentials",
            message="Invalid email or password",
        )

    token = sessions.create_session(user["id"])
    session = sessions.validate_session(token)
    return LoginResponse(token=token, user_id=user["id"], expires_at=session.expires_at)


@router.get("/session", response_model=SessionResponse)
def current_session(session: SessionDep) -> SessionInfo:
    return session


@router.post("/logout", response_model=LogoutResponse)
def logout(
    sessions: SessionStoreDep,
    authorization: str | None = Header(default=None),
) -> LogoutResponse:
    """Invalidate the presented token. Unknown tokens report ``logged_out=false``."""
    token = parse_bearer_token(authorization)
    return LogoutResponse(logged_out=bool(token) and sessions.logout(token))
