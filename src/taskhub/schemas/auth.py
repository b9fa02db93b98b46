"""Schemas describing authentication payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..core.security import TokenType
from .user import UserPublic


class RegisterRequest(BaseModel):
    """Incoming payload for registering a new user."""

    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=6)


class RefreshRequest(BaseModel):
    refresh_token: str


class AuthTokens(BaseModel):
    """Access and refresh tokens returned to clients."""

    access_token: str
    refresh_token: str
    token_type: str = Field(default="bearer", frozen=True)
    expires_in: int
    refresh_expires_in: int


class AuthResponse(BaseModel):
    """Authentication response containing issued tokens and user metadata."""

    user: UserPublic
    tokens: AuthTokens


class TokenPayload(BaseModel):
    """Validated JWT payload."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    exp: datetime
    iat: datetime
    jti: str
    admin: bool = False
    type: TokenType


__all__ = [
    "AuthResponse",
    "AuthTokens",
    "RefreshRequest",
    "RegisterRequest",
    "TokenPayload",
]
