"""Service layer orchestrating user-related repository operations."""

from __future__ import annotations

import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.security import get_password_hash
from ..errors import NotFoundError
from ..models import User
from ..repositories import MembershipRepository, UserRepository
from .policy import Action, Actor, AuthorizationPolicy

logger = logging.getLogger(__name__)


class UserService:
    """High-level business operations for ``User`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = UserRepository(session)
        self._memberships = MembershipRepository(session)
        self._policy = AuthorizationPolicy(session)

    @property
    def repository(self) -> UserRepository:
        """Expose the underlying repository for advanced scenarios."""
        return self._repository

    async def create_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        is_admin: bool = False,
    ) -> User:
        """Create and persist a new user record."""
        user = User(
            name=name,
            email=email,
            is_admin=is_admin,
            hashed_password=get_password_hash(password),
        )
        await self._repository.add(user)
        await self._session.commit()
        await self._repository.refresh(user)
        return user

    async def get_user(self, user_id: int) -> User | None:
        return await self._repository.get(user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        """Fetch a user by their unique email address."""
        return await self._repository.get_by_email(email)

    async def list_users(self) -> list[User]:
        return await self._repository.list()

    async def delete_user(self, actor: Actor, user_id: int) -> None:
        """Delete a user and every membership they hold (admins only)."""
        await self._policy.authorize(actor, Action.DELETE_USER)
        user = await self._repository.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found.")
        removed = await self._memberships.delete_for_user(user_id)
        await self._repository.delete(user)
        await self._session.commit()
        logger.info(
            "User deleted",
            extra={"user_id": user_id, "memberships_removed": removed, "actor_id": actor.id},
        )


__all__ = ["UserService"]
