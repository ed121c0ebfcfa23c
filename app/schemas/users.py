"""Pydantic schemas for user endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


class UserCreateRequest(BaseModel):
    """Payload for registering a user."""

    email: str = Field(..., description="Email address (unique, case-insensitive).")
    password: str = Field(
        ...,
        description="Password: at least 12 characters with uppercase, lowercase and a digit.",
    )
    name: str | None = Field(default=None, description="Display name.")
    phone: str | None = Field(default=None, description="Phone number in E.164 format.")


class UserUpdateRequest(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    email: str | None = None
    name: str | None = None
    phone: str | None = None
    status: Literal["active", "inactive"] | None = None


class UserResponse(BaseModel):
    """Public view of a user (never includes the password hash)."""

    id: int
    email: str
    name: str | None = None
    display_name: str
    phone: str | None = None
    phone_display: str | None = None
    account_age_days: int = 0
    status: str
    role: str
    created_at: datetime
    updated_at: datetime | None = None
    password_reset_at: datetime | None = None
    require_password_change: bool = False
    role_updated_at: datetime | None = None
    preferences: dict[str, Any] | None = Field(
        default=None,
        description="Embedded preferences when requested with include_preferences=true.",
    )
