"""Application factory for the FastAPI app.

Centralizes app construction (metadata, container, middleware, handlers,
routers) so tests can build isolated instances with their own state.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api.routes import (
    admin_router,
    auth_router,
    health_router,
    posts_router,
    preferences_router,
    users_router,
)
from app.core.config import Settings, settings
from app.core.container import AppContainer
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the container's lifecycle: state is dropped on shutdown."""
    container: AppContainer = app.state.container
    logger.info("app.startup", extra={"rate_limit_strategy": container.limiter.strategy})
    try:
        yield
    finally:
        container.close()
        logger.info("app.shutdown")


def create_app(
    container: AppContainer | None = None,
    *,
    config: Settings | None = None,
    setup_logging: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        container: Pre-built stores (tests inject their own); built from
            ``config`` when omitted. Request-time behaviour follows the
            container's own ``config``.
        config: Settings used to build the container and logging; defaults
            to the injected container's settings, then the global ones.
        setup_logging: Configure the root logger (disabled in some tests).

    Returns:
        Configured FastAPI app with middleware, handlers and routers.

    Raises:
        ValidationAppError: If the rate limit configuration is invalid.
    """
    cfg = config or (container.config if container is not None else settings)

    # Logging first so subsequent init logs are formatted as desired
    if setup_logging:
        configure_logging(cfg.log)

    app = FastAPI(
        title=cfg.app.name,
        description=(
            "In-memory demo backend: users, posts, sessions and preferences, "
            "protected by a per-caller rate limiter (fixed window or token bucket)."
        ),
        version="0.1.0",
        debug=cfg.app.debug,
        lifespan=lifespan,
    )
    app.state.container = container or AppContainer.build(cfg)

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    for router in (auth_router, users_router, posts_router, preferences_router, admin_router):
        app.include_router(router, prefix="/v1")
    app.include_router(health_router)

    apply_openapi_customizations(app)

    return app
