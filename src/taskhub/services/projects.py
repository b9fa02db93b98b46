"""Service layer for project administration and visibility."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError, ValidationError
from ..models import Project
from ..repositories import MembershipRepository, ProjectRepository, TaskRepository
from .policy import Action, Actor, AuthorizationPolicy

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({"name", "description"})


def validate_project_fields(values: Mapping[str, Any]) -> dict[str, Any]:
    errors: dict[str, str] = {}
    for name in sorted(set(values) - EDITABLE_FIELDS):
        errors[name] = "Field cannot be changed."
    if "name" in values:
        value = values["name"]
        if not isinstance(value, str) or not value.strip():
            errors["name"] = "Name must be a non-empty string."
        elif len(value) > 255:
            errors["name"] = "Name must be at most 255 characters."
    if "description" in values:
        value = values["description"]
        if value is not None and not isinstance(value, str):
            errors["description"] = "Description must be a string."
    if errors:
        raise ValidationError(fields=sorted(errors), errors=errors)
    return {key: values[key] for key in values if key in EDITABLE_FIELDS}


class ProjectService:
    """High-level business operations for ``Project`` entities."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = ProjectRepository(session)
        self._tasks = TaskRepository(session)
        self._memberships = MembershipRepository(session)
        self._policy = AuthorizationPolicy(session)

    @property
    def repository(self) -> ProjectRepository:
        return self._repository

    async def _require_project(self, project_id: int) -> Project:
        project = await self._repository.get(project_id)
        if project is None:
            raise NotFoundError(f"Project {project_id} not found.")
        return project

    async def create_project(
        self,
        actor: Actor,
        *,
        name: str,
        description: str | None = None,
    ) -> Project:
        """Create and persist a new project (admins only)."""
        await self._policy.authorize(actor, Action.CREATE_PROJECT)
        project = Project(name=name, description=description)
        await self._repository.add(project)
        await self._session.commit()
        await self._repository.refresh(project)
        logger.info("Project created", extra={"project_id": project.id, "actor_id": actor.id})
        return project

    async def get_project(self, actor: Actor, project_id: int) -> Project:
        project = await self._require_project(project_id)
        await self._policy.authorize(actor, Action.VIEW_PROJECT, project_id)
        return project

    async def list_projects_for(self, actor: Actor) -> list[Project]:
        """Return the projects in which ``actor`` holds a membership."""
        await self._policy.authorize(actor, Action.VIEW_PROJECTS)
        return await self._repository.list_for_member(actor.id)

    async def update_project(
        self,
        actor: Actor,
        project_id: int,
        changes: Mapping[str, Any],
    ) -> Project:
        """Apply any subset of name and description.

        An explicit ``None`` description clears it; the name cannot be cleared.
        """
        await self._policy.authorize(actor, Action.UPDATE_PROJECT, project_id)
        project = await self._require_project(project_id)
        cleaned = validate_project_fields(changes)
        if cleaned:
            await self._repository.update_fields(project, cleaned)
            await self._session.commit()
            await self._repository.refresh(project)
        return project

    async def delete_project(self, actor: Actor, project_id: int) -> None:
        """Delete a project together with its tasks and memberships."""
        await self._policy.authorize(actor, Action.DELETE_PROJECT, project_id)
        project = await self._require_project(project_id)
        tasks = await self._tasks.delete_for_project(project_id)
        members = await self._memberships.delete_for_project(project_id)
        await self._repository.delete(project)
        await self._session.commit()
        logger.info(
            "Project deleted",
            extra={
                "project_id": project_id,
                "tasks_removed": tasks,
                "memberships_removed": members,
                "actor_id": actor.id,
            },
        )


__all__ = ["EDITABLE_FIELDS", "ProjectService", "validate_project_fields"]
