"""Repository for interacting with task persistence models."""

from __future__ import annotations

from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from ..models import Task, TaskPriority, TaskStatus
from .base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Concrete repository encapsulating ``Task`` persistence operations."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Task)

    async def list_for_project(
        self,
        project_id: int,
        *,
        status: TaskStatus | None = None,
        priority: TaskPriority | None = None,
    ) -> list[Task]:
        """Return a project's tasks; a ``None`` filter places no constraint."""
        query = select(Task).where(Task.project_id == project_id)
        if status is not None:
            query = query.where(Task.status == status)
        if priority is not None:
            query = query.where(Task.priority == priority)
        result = await self.session.execute(query.order_by(Task.id))
        return list(result.scalars().all())

    async def get_in_project(self, task_id: int, project_id: int) -> Task | None:
        result = await self.session.execute(
            select(Task).where(Task.id == task_id, Task.project_id == project_id)
        )
        return result.scalar_one_or_none()

    async def latest_in_project(self, project_id: int) -> Task | None:
        result = await self.session.execute(
            select(Task)
            .where(Task.project_id == project_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def oldest_in_project(self, project_id: int) -> Task | None:
        result = await self.session.execute(
            select(Task)
            .where(Task.project_id == project_id)
            .order_by(Task.created_at.asc(), Task.id.asc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def highest_priority_in_project(self, project_id: int, title: str | None = None) -> Task | None:
        """Return the most recent high-priority task, optionally matching ``title``."""
        query = select(Task).where(
            Task.project_id == project_id,
            Task.priority == TaskPriority.HIGH,
        )
        if title:
            query = query.where(Task.title == title)
        result = await self.session.execute(
            query.order_by(Task.created_at.desc(), Task.id.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    async def delete_for_project(self, project_id: int) -> int:
        result = await self.session.execute(delete(Task).where(Task.project_id == project_id))
        return result.rowcount or 0
