"""Pydantic schemas for session authentication."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    token: str = Field(..., description="Opaque session token; send as Authorization: Bearer <token>.")
    token_type: str = "bearer"
    user_id: int
    expires_at: datetime


class SessionResponse(BaseModel):
    """Information about the caller's current session."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    created_at: datetime
    expires_at: datetime


class LogoutResponse(BaseModel):
    logged_out: bool
