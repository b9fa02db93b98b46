"""Authentication service encapsulating registration and token flows."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic import ValidationError as PydanticValidationError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings
from ..core.security import (
    ExpiredSignatureError,
    GeneratedToken,
    JWTError,
    TokenType,
    blacklist_token,
    create_token,
    decode_token,
    is_token_blacklisted,
    verify_password,
)
from ..errors import ConflictError, UnauthorizedError
from ..models import User
from ..schemas.auth import TokenPayload
from .users import UserService

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TokenPair:
    """Container for access and refresh tokens."""

    access: GeneratedToken
    refresh: GeneratedToken


class AuthService:
    """Credential store: registration, password checks and JWT lifecycles."""

    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self._session = session
        self._settings = settings
        self._users = UserService(session)

    async def register_user(self, *, name: str, email: str, password: str) -> User:
        if await self._users.get_user_by_email(email) is not None:
            raise ConflictError("Email is already registered.")
        user = await self._users.create_user(name=name, email=email, password=password)
        logger.info("User registered", extra={"user_id": user.id})
        return user

    async def authenticate_user(self, email: str, password: str) -> User | None:
        user = await self._users.get_user_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            return None
        return user

    def build_token_pair(self, user: User) -> TokenPair:
        if user.id is None:
            raise UnauthorizedError("User must be persisted before issuing tokens.")
        access = create_token(
            subject=user.id,
            is_admin=user.is_admin,
            settings=self._settings,
            token_type=TokenType.ACCESS,
        )
        refresh = create_token(
            subject=user.id,
            is_admin=user.is_admin,
            settings=self._settings,
            token_type=TokenType.REFRESH,
        )
        return TokenPair(access=access, refresh=refresh)

    def decode(self, token: str, token_type: TokenType) -> TokenPayload:
        """Verify ``token`` and check its type and revocation status."""
        label = token_type.value.capitalize()
        try:
            raw = decode_token(token=token, token_type=token_type, settings=self._settings)
        except ExpiredSignatureError as exc:
            raise UnauthorizedError(f"{label} token has expired.") from exc
        except JWTError as exc:
            raise UnauthorizedError(f"Invalid {token_type.value} token.") from exc

        try:
            payload = TokenPayload.model_validate(raw)
        except PydanticValidationError as exc:
            raise UnauthorizedError("Malformed token payload.") from exc
        if payload.type is not token_type:
            raise UnauthorizedError("Invalid token type.")
        if is_token_blacklisted(payload.jti):
            raise UnauthorizedError(f"{label} token has been revoked.")
        return payload

    async def user_from_payload(self, payload: TokenPayload) -> User:
        try:
            user_id = int(payload.sub)
        except ValueError as exc:
            raise UnauthorizedError("Invalid token subject.") from exc
        user = await self._users.get_user(user_id)
        if user is None:
            raise UnauthorizedError("User no longer exists.")
        return user

    async def refresh_from_token(self, refresh_token: str) -> tuple[User, TokenPair]:
        """Rotate a refresh token: revoke it and issue a fresh pair."""
        payload = self.decode(refresh_token, TokenType.REFRESH)
        user = await self.user_from_payload(payload)
        blacklist_token(payload.jti, payload.exp)
        return user, self.build_token_pair(user)

    def revoke(self, payload: TokenPayload) -> None:
        blacklist_token(payload.jti, payload.exp)
        logger.info("Token revoked", extra={"user_id": payload.sub, "token_type": payload.type.value})


__all__ = ["AuthService", "TokenPair"]
