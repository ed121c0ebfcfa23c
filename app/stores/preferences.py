"""In-memory per-user preference storage.

Users without stored preferences see the defaults. Updates are validated key
by key and merged shallowly over the current values.
"""

from __future__ import annotations

import copy
import logging
import threading
from typing import Any, Mapping

from app.core.errors import NotFoundAppError, ValidationAppError
from app.stores.users import UserStore, UserView
from app.utils.formatting import format_preferences
from app.utils.validation import validate_preference_value

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCES: dict[str, Any] = {
    "theme": "light",
    "language": "en",
    "notifications": {
        "email": True,
        "push": True,
        "sms": False,
    },
    "privacy": {
        "profile_visible": True,
        "show_email": False,
    },
}


class PreferenceStore:
    """Stores preference overrides per user id."""

    def __init__(self, users: UserStore) -> None:
        self._users = users
        self._lock = threading.RLock()
        self._preferences: dict[int, dict[str, Any]] = {}

    def _require_user(self, user_id: int) -> None:
        if not self._users.exists(user_id):
            raise NotFoundAppError(
                code="user_not_found",
                message="User not found",
                details={"entity": "user", "entity_id": user_id},
            )

    def get_preferences(self, user_id: int) -> dict[str, Any]:
        """Return the user's preferences (defaults when none are stored).

        Raises:
            NotFoundAppError: If the user does not exist.
        """
        self._require_user(user_id)
        with self._lock:
            return copy.deepcopy(self._preferences.get(user_id, DEFAULT_PREFERENCES))

    def update_preferences(self, user_id: int, patch: Mapping[str, Any]) -> dict[str, Any]:
        """Validate and merge ``patch`` into the user's preferences.

        Returns:
            The updated preferences with formatting metadata.

        Raises:
            NotFoundAppError: If the user does not exist.
            ValidationAppError: If any value is invalid; nothing is stored then.
        """
        current = self.get_preferences(user_id)

        for key, value in patch.items():
            if not validate_preference_value(key, value):
                raise ValidationAppError(
                    code="invalid_preference",
                    message=f"Invalid preference value for {key}",
                    details={"field": key},
                )

        updated = {**current, **copy.deepcopy(dict(patch))}
        with self._lock:
            self._preferences[user_id] = updated

        logger.info("preferences.updated", extra={"user_id": user_id, "fields": sorted(patch)})
        return format_preferences(updated)

    def reset_preferences(self, user_id: int) -> dict[str, Any]:
        """Drop stored overrides and return the defaults."""
        self._require_user(user_id)
        with self._lock:
            self._preferences.pop(user_id, None)
        return self.get_preferences(user_id)

    def forget_user(self, user_id: int) -> None:
        with self._lock:
            self._preferences.pop(user_id, None)

    def attach_preferences(self, users: list[UserView]) -> list[UserView]:
        """Return copies of user views with a ``preferences`` entry embedded."""
        return [{**user, "preferences": self.get_preferences(user["id"])} for user in users]

    def clear(self) -> None:
        with self._lock:
            self._preferences.clear()
