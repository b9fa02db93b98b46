"""Routes handling user authentication flows."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from ...core.config import Settings
from ...deps import AccessTokenDependency, DatabaseSessionDependency, SettingsDependency
from ...errors import UnauthorizedError
from ...models import User
from ...schemas import (
    AuthResponse,
    AuthTokens,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    UserPublic,
)
from ...services import AuthService, TokenPair

router = APIRouter(prefix="/auth", tags=["auth"])


def _build_tokens(token_pair: TokenPair, settings: Settings) -> AuthTokens:
    return AuthTokens(
        access_token=token_pair.access.token,
        refresh_token=token_pair.refresh.token,
        expires_in=settings.access_token_expire_minutes * 60,
        refresh_expires_in=settings.refresh_token_expire_minutes * 60,
    )


def _build_response(user: User, token_pair: TokenPair, settings: Settings) -> AuthResponse:
    return AuthResponse(user=UserPublic.model_validate(user), tokens=_build_tokens(token_pair, settings))


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(
    payload: RegisterRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> AuthResponse:
    service = AuthService(session, settings)
    user = await service.register_user(
        name=payload.name,
        email=payload.email,
        password=payload.password,
    )
    return _build_response(user, service.build_token_pair(user), settings)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate using email and password",
)
async def login(
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> AuthResponse:
    service = AuthService(session, settings)
    user = await service.authenticate_user(form_data.username, form_data.password)
    if user is None:
        raise UnauthorizedError("Incorrect email or password.")
    return _build_response(user, service.build_token_pair(user), settings)


@router.post(
    "/refresh",
    response_model=AuthResponse,
    summary="Rotate credentials using a refresh token",
)
async def refresh_tokens(
    payload: RefreshRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> AuthResponse:
    service = AuthService(session, settings)
    user, token_pair = await service.refresh_from_token(payload.refresh_token)
    return _build_response(user, token_pair, settings)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Revoke the presented access token",
)
async def logout(
    token: AccessTokenDependency,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> MessageResponse:
    AuthService(session, settings).revoke(token)
    return MessageResponse(message="Logged out.")
