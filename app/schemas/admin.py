"""Pydantic schemas for admin endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PasswordResetRequest(BaseModel):
    new_password: str = Field(..., description="New password; must satisfy the password policy.")


class BulkRoleUpdateRequest(BaseModel):
    user_ids: list[int] = Field(..., description="Users to update; unknown ids are skipped.")
    role: str = Field(..., description="Role to assign: user, moderator or admin.")


class RateLimitStatusResponse(BaseModel):
    """Limiter state for one caller key, without consuming budget."""

    key: str
    strategy: str
    limit: int
    window_ms: int
    request_count: int | None = Field(
        default=None, description="Requests counted in the current window (fixed_window only)."
    )
    remaining: int
    tracked_entries: int = Field(description="State entries the limiter currently holds across all callers.")
