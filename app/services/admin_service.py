"""Administrative operations spanning several stores.

Covers operator overrides: password resets, bulk role changes, account
removal and rate-limit resets. Each operation touches the stores it needs and
nothing else.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable

from app.adapters.rate_limit.base import AbstractRateLimiter, CallerId, user_caller_key
from app.core.errors import NotFoundAppError, ValidationAppError
from app.stores.posts import PostStore
from app.stores.preferences import PreferenceStore
from app.stores.sessions import SessionStore
from app.stores.users import UserStore, UserView
from app.utils.formatting import utc_now

logger = logging.getLogger(__name__)

VALID_ROLES = ("user", "moderator", "admin")


class AdminService:
    """Operator actions over users, sessions and rate limiting.

    Attributes:
        users: User store.
        sessions: Session store (revoked on password reset and removal).
        preferences: Preference store (cleared on removal).
        posts: Post store (cleared on removal).
        limiter: Active rate limiter.
    """

    def __init__(
        self,
        *,
        users: UserStore,
        sessions: SessionStore,
        preferences: PreferenceStore,
        posts: PostStore,
        limiter: AbstractRateLimiter,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.users = users
        self.sessions = sessions
        self.preferences = preferences
        self.posts = posts
        self.limiter = limiter
        self._clock = clock

    def reset_user_password(self, user_id: int, new_password: str) -> UserView:
        """Set a new password and force a change on next login.

        Existing sessions of the user are revoked.

        Raises:
            NotFoundAppError: If the user does not exist.
            ValidationAppError: If the new password is weak.
        """
        self.users.set_password(user_id, new_password)
        updated = self.users.update_user(
            user_id,
            {
                "password_reset_at": self._clock(),
                "require_password_change": True,
            },
        )
        if updated is None:
            # Removed between the two calls.
            raise NotFoundAppError(code="user_not_found", message="User not found")

        revoked = self.sessions.revoke_user_sessions(user_id)
        logger.warning(
            "admin.password_reset",
            extra={"user_id": user_id, "revoked_sessions": revoked},
        )
        return updated

    def bulk_update_roles(self, user_ids: Iterable[int], role: str) -> list[UserView]:
        """Assign ``role`` to every existing user in ``user_ids``.

        Unknown ids are skipped.

        Raises:
            ValidationAppError: If the role is not recognised.
        """
        if role not in VALID_ROLES:
            raise ValidationAppError(
                code="invalid_role",
                message=f"Invalid role: {role}",
                details={"field": "role", "allowed_values": list(VALID_ROLES)},
            )

        now = self._clock()
        updated: list[UserView] = []
        skipped = 0
        for user_id in user_ids:
            user = self.users.update_user(user_id, {"role": role, "role_updated_at": now})
            if user is None:
                skipped += 1
                continue
            updated.append(user)

        logger.info(
            "admin.roles_updated",
            extra={"role": role, "updated": len(updated), "skipped": skipped},
        )
        return updated

    def remove_user(self, user_id: int) -> bool:
        """Delete a user together with their sessions, preferences and posts."""
        if not self.users.delete_user(user_id):
            return False

        self.sessions.revoke_user_sessions(user_id)
        self.preferences.forget_user(user_id)
        removed_posts = self.posts.delete_posts_by_author(user_id)
        self.limiter.reset(user_caller_key(user_id))
        logger.info("admin.user_removed", extra={"user_id": user_id, "removed_posts": removed_posts})
        return True

    def reset_rate_limit(self, caller: CallerId) -> None:
        """Clear limiter state for a caller key (e.g. ``user:42``)."""
        self.limiter.reset(caller)
        logger.warning(
            "admin.rate_limit_reset",
            extra={"strategy": self.limiter.strategy},
        )
