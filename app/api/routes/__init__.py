from __future__ import annotations

from app.api.routes.admin import router as admin_router
from app.api.routes.auth import router as auth_router
from app.api.routes.health import router as health_router
from app.api.routes.posts import router as posts_router
from app.api.routes.preferences import router as preferences_router
from app.api.routes.users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "health_router",
    "posts_router",
    "preferences_router",
    "users_router",
]
