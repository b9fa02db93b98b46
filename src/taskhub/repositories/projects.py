"""Repository for project persistence."""

from __future__ import annotations

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Membership, Project
from .base import BaseRepository


class ProjectRepository(BaseRepository[Project]):
    """Persistence helpers for ``Project`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Project)

    async def list_for_member(self, user_id: int) -> list[Project]:
        """Return projects in which ``user_id`` holds a membership."""
        result = await self.session.execute(
            select(Project)
            .join(Membership, Membership.project_id == Project.id)
            .where(Membership.user_id == user_id)
            .order_by(Project.id)
        )
        return list(result.scalars().all())
