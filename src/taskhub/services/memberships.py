"""Membership ledger and project-session time tracking."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    NotLoggedInError,
    NotMemberError,
    ValidationError,
)
from ..models import MemberRole, Membership, ensure_utc, utcnow
from ..repositories import MembershipRepository, ProjectRepository, UserRepository
from .policy import Action, Actor, AuthorizationPolicy, is_permitted

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def elapsed_minutes(started_at: datetime, ended_at: datetime) -> int:
    """Whole minutes between two instants, truncated and never negative."""
    seconds = (ensure_utc(ended_at) - ensure_utc(started_at)).total_seconds()
    return max(int(seconds // 60), 0)


class MembershipService:
    """Tracks who belongs to which project, in what role, and for how long.

    ``clock`` supplies "now" for session bookkeeping and defaults to UTC wall
    time.
    """

    def __init__(self, session: AsyncSession, *, clock: Clock = utcnow) -> None:
        self._session = session
        self._clock = clock
        self._repository = MembershipRepository(session)
        self._projects = ProjectRepository(session)
        self._users = UserRepository(session)
        self._policy = AuthorizationPolicy(session)

    @property
    def repository(self) -> MembershipRepository:
        return self._repository

    async def _require_project(self, project_id: int) -> None:
        if await self._projects.get(project_id) is None:
            raise NotFoundError(f"Project {project_id} not found.")

    async def find_role(self, project_id: int, user_id: int) -> MemberRole | None:
        """Return the user's role in the project, or ``None`` for non-members."""
        membership = await self._repository.get_pair(project_id, user_id)
        return membership.role if membership is not None else None

    async def list_members(self, actor: Actor, project_id: int) -> list[Membership]:
        await self._require_project(project_id)
        await self._policy.authorize(actor, Action.VIEW_PROJECT, project_id)
        return await self._repository.list_for_project(project_id)

    async def add_member(
        self,
        actor: Actor,
        project_id: int,
        user_id: int,
        role: MemberRole | str,
    ) -> Membership:
        """Attach ``user_id`` to the project with ``role``.

        Raises ``ConflictError`` when the pair already has a membership.
        """
        await self._policy.authorize(actor, Action.ADD_MEMBER, project_id)
        await self._require_project(project_id)
        if await self._users.get(user_id) is None:
            raise NotFoundError(f"User {user_id} not found.")
        try:
            role = MemberRole(role)
        except ValueError:
            raise ValidationError("Invalid role.", fields=["role"]) from None
        if await self._repository.get_pair(project_id, user_id) is not None:
            raise ConflictError("User is already assigned to this project.")

        membership = Membership(
            project_id=project_id,
            user_id=user_id,
            role=role,
            contribution_minutes=0,
            login_at=None,
            logout_at=None,
            last_activity_at=self._clock(),
        )
        try:
            await self._repository.add(membership)
            await self._session.commit()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError("User is already assigned to this project.") from exc
        await self._repository.refresh(membership)
        logger.info(
            "Member added",
            extra={"project_id": project_id, "user_id": user_id, "role": role.value},
        )
        return membership

    async def remove_member(self, actor: Actor, project_id: int, user_id: int) -> None:
        await self._policy.authorize(actor, Action.REMOVE_MEMBER, project_id)
        await self._require_project(project_id)
        membership = await self._repository.get_pair(project_id, user_id)
        if membership is None:
            raise NotMemberError()
        await self._repository.delete(membership)
        await self._session.commit()
        logger.info("Member removed", extra={"project_id": project_id, "user_id": user_id})

    async def _release_lock(self) -> None:
        # Only reads ran since the lock was taken; commit ends the transaction
        # without expiring rows the caller already holds.
        await self._session.commit()

    async def _lock_own_membership(self, actor: Actor, project_id: int) -> Membership:
        await self._require_project(project_id)
        membership = await self._repository.get_pair_for_update(project_id, actor.id)
        if membership is None:
            await self._release_lock()
            raise NotMemberError()
        if not is_permitted(Action.PROJECT_SESSION, is_admin=actor.is_admin, role=membership.role):
            await self._release_lock()
            raise ForbiddenError()
        return membership

    async def record_login(self, actor: Actor, project_id: int) -> Membership:
        """Start the actor's session in the project.

        Logging in while a session is already open restarts the clock; the
        minutes since the earlier login are not accrued.
        """
        membership = await self._lock_own_membership(actor, project_id)
        now = self._clock()
        membership.login_at = now
        membership.logout_at = None
        membership.last_activity_at = now
        self._session.add(membership)
        await self._session.commit()
        await self._repository.refresh(membership)
        logger.info("Project session started", extra={"project_id": project_id, "user_id": actor.id})
        return membership

    async def record_logout(self, actor: Actor, project_id: int) -> Membership:
        """Close the actor's session and accrue its whole minutes."""
        membership = await self._lock_own_membership(actor, project_id)
        if membership.login_at is None:
            await self._release_lock()
            raise NotLoggedInError()
        now = self._clock()
        minutes = elapsed_minutes(membership.login_at, now)
        membership.contribution_minutes += minutes
        membership.logout_at = now
        membership.login_at = None
        membership.last_activity_at = now
        self._session.add(membership)
        await self._session.commit()
        await self._repository.refresh(membership)
        logger.info(
            "Project session ended",
            extra={
                "project_id": project_id,
                "user_id": actor.id,
                "minutes": minutes,
                "contribution_minutes": membership.contribution_minutes,
            },
        )
        return membership


__all__ = ["Clock", "MembershipService", "elapsed_minutes"]
