"""Input validation helpers shared by the stores.

These are pure predicates (plus ``sanitize_input``); stores decide which
error to raise when a check fails.
"""

from __future__ import annotations

import html
import re
from typing import Any

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")

VALID_THEMES = ("light", "dark", "auto")
VALID_LANGUAGES = ("en", "es", "fr", "de", "ja")
MAPPING_PREFERENCES = ("notifications", "privacy")
DEFAULT_MIN_PASSWORD_CHARS = 12


def validate_email(email: Any) -> bool:
    """Return True when ``email`` looks like ``local@domain.tld``."""
    return isinstance(email, str) and bool(_EMAIL_RE.match(email))


def validate_password(password: Any, *, min_chars: int = DEFAULT_MIN_PASSWORD_CHARS) -> bool:
    """Check password strength.

    A strong password has at least ``min_chars`` characters (the user store
    passes AUTH_MIN_PASSWORD_CHARS) and mixes uppercase, lowercase and digits.

    Examples:
        >>> validate_password("SecurePass123")
        True
        >>> validate_password("weak")
        False
    """
    if not isinstance(password, str):
        return False

    return (
        len(password) >= min_chars
        and any(c.isupper() for c in password)
        and any(c.islower() for c in password)
        and any(c.isdigit() for c in password)
    )


def sanitize_input(value: Any) -> str:
    """Escape HTML-significant characters; non-strings become ``""``."""
    if not isinstance(value, str):
        return ""
    return html.escape(value, quote=True).replace("/", "&#x2F;")


def validate_phone_number(phone: Any) -> bool:
    """Validate an E.164-style phone number (optional ``+``, up to 15 digits)."""
    return isinstance(phone, str) and bool(_PHONE_RE.match(phone))


def validate_preference_value(key: str, value: Any) -> bool:
    """Validate a single preference entry.

    Unknown keys are accepted as-is.
    """
    if key == "theme":
        return value in VALID_THEMES
    if key == "language":
        return value in VALID_LANGUAGES
    if key in MAPPING_PREFERENCES:
        return isinstance(value, dict)
    return True
