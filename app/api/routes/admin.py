"""Operator endpoints guarded by the X-Admin-Token header."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from app.adapters.rate_limit.fixed_window import InMemoryFixedWindowRateLimiter
from app.core.auth import verify_admin_token
from app.core.dependencies import AdminServiceDep, RateLimiterDep
from app.schemas.admin import BulkRoleUpdateRequest, PasswordResetRequest, RateLimitStatusResponse
from app.schemas.users import UserResponse

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(verify_admin_token)])


@router.post("/users/{user_id}/password-reset", response_model=UserResponse)
def reset_user_password(user_id: int, payload: PasswordResetRequest, admin: AdminServiceDep) -> dict:
    return admin.reset_user_password(user_id, payload.new_password)


@router.post("/users/roles", response_model=list[UserResponse])
def bulk_update_roles(payload: BulkRoleUpdateRequest, admin: AdminServiceDep) -> list[dict]:
    return admin.bulk_update_roles(payload.user_ids, payload.role)


@router.get("/rate-limits/{key}", response_model=RateLimitStatusResponse)
def rate_limit_status(key: str, limiter: RateLimiterDep) -> RateLimitStatusResponse:
    """Inspect a caller key (``user:<id>`` or ``ip:<host>``) without consuming budget."""
    request_count = None
    if isinstance(limiter, InMemoryFixedWindowRateLimiter):
        request_count = limiter.get_request_count(key)

    return RateLimitStatusResponse(
        key=key,
        strategy=limiter.strategy,
        limit=limiter.limit,
        window_ms=limiter.window_ms,
        request_count=request_count,
        remaining=limiter.peek_remaining(key),
        tracked_entries=limiter.tracked_entries(),
    )


@router.delete("/rate-limits/{key}", status_code=status.HTTP_204_NO_CONTENT)
def reset_rate_limit(key: str, admin: AdminServiceDep) -> None:
    """Clear limiter state for a caller key; succeeds even if the key is unknown."""
    admin.reset_rate_limit(key)
