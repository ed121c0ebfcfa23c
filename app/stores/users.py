"""In-memory user store.

Owns user records and their password hashes. Every public method returns the
formatted public view (see ``format_user_response``), never the record
itself.
"""

from __future__ import annotations

import itertools
import logging
import threading
from datetime import datetime
from typing import Any, Callable, Mapping

from app.core.errors import NotFoundAppError, ValidationAppError
from app.core.security import DEFAULT_HASH_ITERATIONS, hash_password, verify_password
from app.models.user import User
from app.utils.formatting import format_user_response, utc_now
from app.utils.validation import (
    DEFAULT_MIN_PASSWORD_CHARS,
    validate_email,
    validate_password,
    validate_phone_number,
)

logger = logging.getLogger(__name__)

UserView = dict[str, Any]

VALID_STATUSES = ("active", "inactive")

# Fields a caller may change through update_user.
UPDATABLE_FIELDS = frozenset(
    {
        "email",
        "name",
        "phone",
        "status",
        "role",
        "role_updated_at",
        "password_reset_at",
        "require_password_change",
    }
)


def _invalid_password_error(min_chars: int) -> ValidationAppError:
    return ValidationAppError(
        code="weak_password",
        message=(
            f"Password must be at least {min_chars} characters with uppercase, "
            "lowercase, and number"
        ),
        details={"field": "password", "min_value": min_chars},
    )


class UserStore:
    """Thread-safe in-memory user repository with sequential ids."""

    def __init__(
        self,
        *,
        min_password_chars: int = DEFAULT_MIN_PASSWORD_CHARS,
        hash_iterations: int = DEFAULT_HASH_ITERATIONS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._min_password_chars = min_password_chars
        self._hash_iterations = hash_iterations
        self._clock = clock
        self._lock = threading.RLock()
        self._users: dict[int, User] = {}
        self._ids = itertools.count(1)

    def _view(self, user: User) -> UserView:
        return format_user_response(user, now=self._clock())

    def _hash_new_password(self, password: str) -> str:
        if not validate_password(password, min_chars=self._min_password_chars):
            raise _invalid_password_error(self._min_password_chars)
        return hash_password(password, iterations=self._hash_iterations)

    def _check_email_locked(self, email: Any, *, exclude_id: int | None = None) -> str:
        if not validate_email(email):
            raise ValidationAppError(
                code="invalid_email",
                message="Invalid email format",
                details={"field": "email"},
            )

        normalized = email.strip().lower()
        for user in self._users.values():
            if user.email == normalized and user.id != exclude_id:
                raise ValidationAppError(
                    code="email_already_exists",
                    message="A user with this email already exists",
                    details={"field": "email"},
                )
        return normalized

    @staticmethod
    def _check_phone(phone: Any) -> str | None:
        if phone is None:
            return None
        if not validate_phone_number(phone):
            raise ValidationAppError(
                code="invalid_phone",
                message="Phone number must be in E.164 format",
                details={"field": "phone"},
            )
        return phone

    def create_user(
        self,
        email: str,
        password: str,
        name: str | None = None,
        *,
        phone: str | None = None,
    ) -> UserView:
        """Register a new user.

        Raises:
            ValidationAppError: On malformed email, weak password, invalid
                phone or duplicate email.
        """
        password_hash = self._hash_new_password(password)

        with self._lock:
            normalized_email = self._check_email_locked(email)
            user = User(
                id=next(self._ids),
                email=normalized_email,
                name=name,
                phone=self._check_phone(phone),
                password_hash=password_hash,
                created_at=self._clock(),
            )
            self._users[user.id] = user

        logger.info("user.created", extra={"user_id": user.id})
        return self._view(user)

    def get_user_by_id(self, user_id: int) -> UserView | None:
        with self._lock:
            user = self._users.get(user_id)
            return self._view(user) if user else None

    def get_user_by_email(self, email: str) -> UserView | None:
        normalized = email.strip().lower()
        with self._lock:
            for user in self._users.values():
                if user.email == normalized:
                    return self._view(user)
        return None

    def exists(self, user_id: int) -> bool:
        with self._lock:
            return user_id in self._users

    def update_user(self, user_id: int, patch: Mapping[str, Any]) -> UserView | None:
        """Merge ``patch`` into the user and stamp ``updated_at``.

        Unknown fields are ignored. Returns None when the user does not exist.

        Raises:
            ValidationAppError: If a patched email, phone or status is invalid.
        """
        changes = {k: v for k, v in patch.items() if k in UPDATABLE_FIELDS}

        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None

            if "email" in changes:
                changes["email"] = self._check_email_locked(changes["email"], exclude_id=user_id)
            if "phone" in changes:
                changes["phone"] = self._check_phone(changes["phone"])
            if "status" in changes and changes["status"] not in VALID_STATUSES:
                raise ValidationAppError(
                    code="invalid_status",
                    message=f"Invalid status: {changes['status']}",
                    details={"field": "status", "allowed_values": list(VALID_STATUSES)},
                )

            fields = sorted(changes)
            now = self._clock()
            status = changes.pop("status", None)
            for field_name, value in changes.items():
                setattr(user, field_name, value)
            if status == "inactive":
                user.deactivate(now)
            elif status is not None:
                user.status = status
            user.updated_at = now

        logger.info("user.updated", extra={"user_id": user_id, "fields": fields})
        return self._view(user)

    def set_password(self, user_id: int, password: str) -> None:
        """Replace a user's password hash.

        Raises:
            ValidationAppError: If the password is weak.
            NotFoundAppError: If the user does not exist.
        """
        password_hash = self._hash_new_password(password)
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                raise NotFoundAppError(
                    code="user_not_found",
                    message="User not found",
                    details={"entity": "user", "entity_id": user_id},
                )
            user.password_hash = password_hash
            user.updated_at = self._clock()

    def verify_credentials(self, email: str, password: str) -> UserView | None:
        """Return the user when email and password match an active account."""
        normalized = email.strip().lower()
        with self._lock:
            user = next((u for u in self._users.values() if u.email == normalized), None)

        if user is None or not user.is_active():
            return None
        if not verify_password(password, user.password_hash):
            return None
        return self._view(user)

    def delete_user(self, user_id: int) -> bool:
        with self._lock:
            removed = self._users.pop(user_id, None)

        if removed is not None:
            logger.info("user.deleted", extra={"user_id": user_id})
        return removed is not None

    def list_users(self, *, status: str | None = None) -> list[UserView]:
        """List users in id order, optionally filtered by status."""
        with self._lock:
            users = sorted(self._users.values(), key=lambda u: u.id)
            if status is not None:
                users = [u for u in users if u.status == status]
            return [self._view(u) for u in users]

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
            self._ids = itertools.count(1)
