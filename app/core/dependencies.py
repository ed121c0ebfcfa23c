"""FastAPI dependencies resolving settings and stores from the application container."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.config import Settings
from app.core.container import AppContainer
from app.services.admin_service import AdminService
from app.stores.posts import PostStore
from app.stores.preferences import PreferenceStore
from app.stores.sessions import SessionStore
from app.stores.users import UserStore


def get_container(request: Request) -> AppContainer:
    return request.app.state.container


ContainerDep = Annotated[AppContainer, Depends(get_container)]


def get_settings(container: ContainerDep) -> Settings:
    """Settings the running application was built from."""
    return container.config



def get_user_store(container: ContainerDep) -> UserStore:
    return container.users


def get_post_store(container: ContainerDep) -> PostStore:
    return container.posts


def get_session_store(container: ContainerDep) -> SessionStore:
    return container.sessions


def get_preference_store(container: ContainerDep) -> PreferenceStore:
    return container.preferences


def get_rate_limiter(container: ContainerDep) -> AbstractRateLimiter:
    return container.limiter


def get_admin_service(container: ContainerDep) -> AdminService:
    return container.admin


SettingsDep = Annotated[Settings, Depends(get_settings)]
UserStoreDep = Annotated[UserStore, Depends(get_user_store)]
PostStoreDep = Annotated[PostStore, Depends(get_post_store)]
SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]
PreferenceStoreDep = Annotated[PreferenceStore, Depends(get_preference_store)]
RateLimiterDep = Annotated[AbstractRateLimiter, Depends(get_rate_limiter)]
AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
