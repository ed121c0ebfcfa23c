from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status

from app.core.auth import SessionDep
from app.core.dependencies import AdminServiceDep, PreferenceStoreDep, UserStoreDep
from app.core.errors import AuthorizationAppError, NotFoundAppError
from app.core.rate_limit import enforce_rate_limit
from app.schemas.users import UserCreateRequest, UserResponse, UserUpdateRequest

router = APIRouter(tags=["Users"], dependencies=[Depends(enforce_rate_limit)])


def _require_self(session_user_id: int, user_id: int) -> None:
    if session_user_id != user_id:
        raise AuthorizationAppError(
            code="forbidden",
            message="You can only modify your own account",
        )


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreateRequest, users: UserStoreDep) -> dict:
    """Register a new user.

    Raises:
        ValidationAppError: 400 on malformed email, weak password or
            duplicate email.
    """
    return users.create_user(
        payload.email,
        payload.password,
        payload.name,
        phone=payload.phone,
    )


@router.get("/users", response_model=list[UserResponse])
def list_users(
    users: UserStoreDep,
    preferences: PreferenceStoreDep,
    status_filter: str | None = Query(default=None, alias="status"),
    email: str | None = Query(default=None, description="Exact, case-insensitive email match."),
    include_preferences: bool = False,
) -> list[dict]:
    """List users, optionally filtered by status or email and with preferences embedded."""
    if email is not None:
        found = users.get_user_by_email(email)
        result = [found] if found and status_filter in (None, found["status"]) else []
    else:
        result = users.list_users(status=status_filter)
    if include_preferences:
        return preferences.attach_preferences(result)
    return result


@router.get("/users/{user_id}", response_model=UserResponse)
def get_user(user_id: int, users: UserStoreDep) -> dict:
    user = users.get_user_by_id(user_id)
    if user is None:
        raise NotFoundAppError(code="user_not_found", message="User not found")
    return user


@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UserUpdateRequest,
    session: SessionDep,
    users: UserStoreDep,
) -> dict:
    """Update the caller's own profile."""
    _require_self(session.user_id, user_id)
    updated = users.update_user(user_id, payload.model_dump(exclude_unset=True))
    if updated is None:
        raise NotFoundAppError(code="user_not_found", message="User not found")
    return updated


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, session: SessionDep, admin: AdminServiceDep) -> Response:
    """Delete the caller's own account along with their posts and sessions."""
    _require_self(session.user_id, user_id)
    if not admin.remove_user(user_id):
        raise NotFoundAppError(code="user_not_found", message="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
