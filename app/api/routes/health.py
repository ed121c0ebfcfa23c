from __future__ import annotations

from fastapi import APIRouter

from app.core.dependencies import RateLimiterDep

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(limiter: RateLimiterDep) -> dict:
    """Health check endpoint.

    Returns a status response plus the active rate limit strategy. Used by
    load balancers and monitoring systems; not rate limited.
    """

    return {"status": "ok", "rate_limit_strategy": limiter.strategy}
