from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from app.core.auth import SessionDep
from app.core.dependencies import PreferenceStoreDep
from app.core.rate_limit import enforce_rate_limit

router = APIRouter(tags=["Preferences"], dependencies=[Depends(enforce_rate_limit)])


@router.get("/me/preferences")
def get_preferences(session: SessionDep, preferences: PreferenceStoreDep) -> dict[str, Any]:
    return preferences.get_preferences(session.user_id)


@router.patch("/me/preferences")
def update_preferences(
    session: SessionDep,
    preferences: PreferenceStoreDep,
    patch: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Merge preference changes.

    Raises:
        ValidationAppError: 400 on an invalid theme, language or nested value.
    """
    return preferences.update_preferences(session.user_id, patch)


@router.delete("/me/preferences")
def reset_preferences(session: SessionDep, preferences: PreferenceStoreDep) -> dict[str, Any]:
    return preferences.reset_preferences(session.user_id)
