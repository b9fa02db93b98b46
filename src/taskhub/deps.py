"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from .core.config import Settings, get_settings
from .core.security import TokenType
from .db.session import get_session
from .models import User
from .schemas.auth import TokenPayload
from .services import Actor, AuthService

SettingsDependency = Annotated[Settings, Depends(get_settings)]

# Relative to the OpenAPI document, which is served under the API prefix.
_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency that yields a database session."""

    async for session in get_session():
        yield session


DatabaseSessionDependency = Annotated[AsyncSession, Depends(get_db_session)]


async def get_access_token_payload(
    settings: SettingsDependency,
    session: DatabaseSessionDependency,
    token: str = Depends(_oauth2_scheme),
) -> TokenPayload:
    return AuthService(session, settings).decode(token, TokenType.ACCESS)


AccessTokenDependency = Annotated[TokenPayload, Depends(get_access_token_payload)]


async def get_current_user(
    payload: AccessTokenDependency,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> User:
    """Resolve the authenticated user behind the bearer token."""

    return await AuthService(session, settings).user_from_payload(payload)


CurrentUserDependency = Annotated[User, Depends(get_current_user)]


async def get_actor(user: CurrentUserDependency) -> Actor:
    return Actor.from_user(user)


ActorDependency = Annotated[Actor, Depends(get_actor)]


__all__ = [
    "AccessTokenDependency",
    "ActorDependency",
    "CurrentUserDependency",
    "DatabaseSessionDependency",
    "SettingsDependency",
    "get_access_token_payload",
    "get_actor",
    "get_current_user",
    "get_db_session",
]
