"""User domain record held by the in-memory user store."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass
class User:
    """A registered user.

    ``password_hash`` never leaves the store; public views go through
    ``app.utils.formatting.format_user_response``.
    """

    id: int
    email: str
    name: str | None
    password_hash: str
    created_at: datetime
    status: str = "active"
    role: str = "user"
    phone: str | None = None
    updated_at: datetime | None = None
    password_reset_at: datetime | None = None
    require_password_change: bool = False
    role_updated_at: datetime | None = None

    def is_active(self) -> bool:
        return self.status == "active"

    def deactivate(self, now: datetime) -> None:
        self.status = "inactive"
        self.updated_at = now

    def account_age_days(self, now: datetime) -> int:
        """Whole days since creation, rounded up."""
        return math.ceil(abs(now - self.created_at).total_seconds() / SECONDS_PER_DAY)
