"""Application container owning all in-memory state.

The container is built once per application by ``create_app``,
stored on ``app.state.container`` and handed to routes through FastAPI
dependencies. Tests build their own container for isolation.

The resolved ``Settings`` travel with the container, so request-time
consumers (rate limiting, admin guard, middleware) read the same
configuration the stores were built from.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.adapters.rate_limit.base import AbstractRateLimiter, Clock, wall_clock_ms
from app.adapters.rate_limit.factory import create_rate_limiter
from app.core.config import Settings, settings
from app.services.admin_service import AdminService
from app.stores.posts import PostStore
from app.stores.preferences import PreferenceStore
from app.stores.sessions import SessionStore
from app.stores.users import UserStore

logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Configuration, stores, limiter and services of one application instance."""

    config: Settings
    users: UserStore
    posts: PostStore
    sessions: SessionStore
    preferences: PreferenceStore
    limiter: AbstractRateLimiter
    admin: AdminService

    @classmethod
    def build(
        cls,
        config: Settings | None = None,
        *,
        limiter_clock: Clock = wall_clock_ms,
    ) -> AppContainer:
        """Construct every store from configuration.

        Raises:
            ValidationAppError: If the rate limit strategy is unknown.
        """
        cfg = config or settings

        users = UserStore(
            min_password_chars=cfg.auth.min_password_chars,
            hash_iterations=cfg.auth.password_hash_iterations,
        )
        posts = PostStore(
            min_title_chars=cfg.app.post_min_title_chars,
            min_publish_chars=cfg.app.post_min_publish_chars,
        )
        sessions = SessionStore(ttl_seconds=cfg.auth.session_ttl_seconds)
        preferences = PreferenceStore(users)
        limiter = create_rate_limiter(cfg.rate_limit, clock=limiter_clock)
        admin = AdminService(
            users=users,
            sessions=sessions,
            preferences=preferences,
            posts=posts,
            limiter=limiter,
        )

        logger.info(
            "container.built",
            extra={
                "rate_limit_enabled": cfg.rate_limit.enabled,
                "rate_limit_strategy": limiter.strategy,
                "rate_limit_requests": cfg.rate_limit.requests,
                "rate_limit_window_ms": cfg.rate_limit.window_ms,
            },
        )
        return cls(
            config=cfg,
            users=users,
            posts=posts,
            sessions=sessions,
            preferences=preferences,
            limiter=limiter,
            admin=admin,
        )

    def close(self) -> None:
        """Drop all in-memory state, including limiter counters and buckets."""
        self.sessions.clear()
        self.preferences.clear()
        self.posts.clear()
        self.users.clear()
        self.limiter.clear()
        logger.info("container.closed")
