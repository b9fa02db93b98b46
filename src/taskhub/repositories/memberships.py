"""Repository for project memberships keyed by (project_id, user_id)."""

from __future__ import annotations

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Membership
from .base import BaseRepository


class MembershipRepository(BaseRepository[Membership]):
    """Persistence helpers for ``Membership`` rows."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Membership)

    def _pair_query(self, project_id: int, user_id: int):
        return select(Membership).where(
            Membership.project_id == project_id,
            Membership.user_id == user_id,
        )

    async def get_pair(self, project_id: int, user_id: int) -> Membership | None:
        """Return the membership of ``user_id`` in ``project_id`` if any."""
        result = await self.session.execute(self._pair_query(project_id, user_id))
        return result.scalar_one_or_none()

    async def get_pair_for_update(self, project_id: int, user_id: int) -> Membership | None:
        """Load a membership under a row lock, refreshing any cached state."""
        query = (
            self._pair_query(project_id, user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_project(self, project_id: int) -> list[Membership]:
        result = await self.session.execute(
            select(Membership).where(Membership.project_id == project_id).order_by(Membership.id)
        )
        return list(result.scalars().all())

    async def delete_for_project(self, project_id: int) -> int:
        """Remove every membership of a project, returning the row count."""
        result = await self.session.execute(
            delete(Membership).where(Membership.project_id == project_id)
        )
        return result.rowcount or 0

    async def delete_for_user(self, user_id: int) -> int:
        """Remove every membership held by a user, returning the row count."""
        result = await self.session.execute(delete(Membership).where(Membership.user_id == user_id))
        return result.rowcount or 0
