"""Response formatting helpers.

Turn domain records into the public dict shapes returned by stores and
routes. Nothing here mutates its input.
"""

from __future__ import annotations

import re
from dataclasses import asdict
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Mapping

if TYPE_CHECKING:
    from app.models.user import User

PREFERENCES_VERSION = "2.0"

# Fields that must never appear in a public user view.
_PRIVATE_USER_FIELDS = ("password_hash",)


def utc_now() -> datetime:
    """Return an aware UTC timestamp."""
    return datetime.now(timezone.utc)


def format_date(value: datetime) -> str:
    return value.isoformat()


def format_user_response(user: User, *, now: datetime | None = None) -> dict[str, Any]:
    """Build the public view of a user.

    Drops the password hash and adds ``display_name`` (the name, or the local
    part of the email when no name is set), ``phone_display`` and
    ``account_age_days`` measured at ``now``.
    """
    data = {k: v for k, v in asdict(user).items() if k not in _PRIVATE_USER_FIELDS}
    data["display_name"] = user.name or user.email.split("@")[0]
    data["phone_display"] = format_phone_number(user.phone) if user.phone else None
    data["account_age_days"] = user.account_age_days(now or utc_now())
    return data


def truncate_text(text: str, max_length: int = 100) -> str:
    """Shorten ``text`` to ``max_length`` characters, ending with ``...``."""
    if len(text) <= max_length:
        return text
    return text[: max(0, max_length - 3)] + "..."


def format_phone_number(phone: str) -> str:
    """Format 10-digit numbers as ``(555) 123-4567``; others pass through."""
    digits = re.sub(r"\D", "", phone)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    return phone


def format_preferences(preferences: Mapping[str, Any], *, now: datetime | None = None) -> dict[str, Any]:
    """Attach ``last_updated`` and ``version`` metadata to preferences."""
    return {
        **preferences,
        "last_updated": format_date(now or utc_now()),
        "version": PREFERENCES_VERSION,
    }


def format_error(
    code: str,
    message: str,
    *,
    request_id: str | None = None,
    details: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build the ``{"error": {...}}`` body returned for failed requests.

    ``details`` is included only when non-empty.
    """
    error: dict[str, Any] = {"code": code, "message": message, "request_id": request_id}
    if details:
        error["details"] = dict(details)
    return {"error": error}
