"""Task lifecycle: creation, role-gated mutation and project-scoped queries."""

from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, TypeVar

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import NotFoundError, NotMemberError, ValidationError
from ..models import Task, TaskPriority, TaskStatus
from ..repositories import MembershipRepository, ProjectRepository, TaskRepository
from .policy import Action, Actor, AuthorizationPolicy

logger = logging.getLogger(__name__)

EnumType = TypeVar("EnumType", bound=Enum)

EDITABLE_FIELDS = frozenset({"title", "description", "priority", "status", "due_date"})


def _coerce_enum(enum_type: type[EnumType], value: object) -> EnumType | None:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        return None


def _coerce_date(value: object) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    return None


def validate_task_fields(values: Mapping[str, Any], *, required: bool) -> dict[str, Any]:
    """Normalise task field values, collecting every failing field.

    With ``required`` set, title, status, priority and due_date must all be
    present (task creation); otherwise only the supplied fields are checked.
    """
    cleaned: dict[str, Any] = {}
    errors: dict[str, str] = {}

    unknown = set(values) - EDITABLE_FIELDS
    for name in sorted(unknown):
        errors[name] = "Field cannot be changed."

    if required:
        for name in ("title", "status", "priority", "due_date"):
            if values.get(name) is None:
                errors[name] = "Field is required."

    if "title" in values and "title" not in errors:
        title = values["title"]
        if not isinstance(title, str) or not title.strip():
            errors["title"] = "Title must be a non-empty string."
        elif len(title) > 255:
            errors["title"] = "Title must be at most 255 characters."
        else:
            cleaned["title"] = title
    if "description" in values:
        description = values["description"]
        if description is not None and not isinstance(description, str):
            errors["description"] = "Description must be a string."
        else:
            cleaned["description"] = description
    if "status" in values and "status" not in errors:
        status = _coerce_enum(TaskStatus, values["status"])
        if status is None:
            errors["status"] = f"Status must be one of: {', '.join(s.value for s in TaskStatus)}."
        else:
            cleaned["status"] = status
    if "priority" in values and "priority" not in errors:
        priority = _coerce_enum(TaskPriority, values["priority"])
        if priority is None:
            errors["priority"] = f"Priority must be one of: {', '.join(p.value for p in TaskPriority)}."
        else:
            cleaned["priority"] = priority
    if "due_date" in values and "due_date" not in errors:
        due_date = _coerce_date(values["due_date"])
        if due_date is None:
            errors["due_date"] = "Due date must be a valid date."
        else:
            cleaned["due_date"] = due_date

    if errors:
        raise ValidationError(fields=sorted(errors), errors=errors)
    return cleaned


class TaskService:
    """High-level business orchestration for ``Task`` entities.

    Every operation takes the acting user explicitly. Lookups run first
    (``NotFoundError``), then the authorization check (``ForbiddenError``),
    then field validation, so a denied or invalid call never mutates state.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._repository = TaskRepository(session)
        self._projects = ProjectRepository(session)
        self._memberships = MembershipRepository(session)
        self._policy = AuthorizationPolicy(session)

    @property
    def repository(self) -> TaskRepository:
        """Expose the underlying repository for advanced scenarios."""
        return self._repository

    async def _require_project(self, project_id: int) -> None:
        if await self._projects.get(project_id) is None:
            raise NotFoundError(f"Project {project_id} not found.")

    async def _require_task(self, task_id: int, project_id: int | None) -> Task:
        if project_id is None:
            task = await self._repository.get(task_id)
        else:
            task = await self._repository.get_in_project(task_id, project_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found.")
        return task

    async def _visible_project(self, actor: Actor, project_id: int) -> None:
        await self._require_project(project_id)
        await self._policy.authorize(actor, Action.VIEW_TASKS, project_id)

    async def create_task(
        self,
        actor: Actor,
        project_id: int,
        *,
        title: str,
        priority: TaskPriority | str,
        due_date: date | str,
        status: TaskStatus | str = TaskStatus.NEW,
        description: str | None = None,
    ) -> Task:
        """Create a task owned by ``project_id`` (managers and admins)."""
        await self._require_project(project_id)
        await self._policy.authorize(actor, Action.CREATE_TASK, project_id)
        fields = validate_task_fields(
            {
                "title": title,
                "description": description,
                "status": status,
                "priority": priority,
                "due_date": due_date,
            },
            required=True,
        )
        task = Task(project_id=project_id, **fields)
        await self._repository.add(task)
        await self._session.commit()
        await self._repository.refresh(task)
        logger.info(
            "Task created",
            extra={"task_id": task.id, "project_id": project_id, "actor_id": actor.id},
        )
        return task

    async def get_task(self, actor: Actor, task_id: int, *, project_id: int | None = None) -> Task:
        task = await self._require_task(task_id, project_id)
        await self._policy.authorize(actor, Action.VIEW_TASKS, task.project_id)
        return task

    async def list_tasks(self, actor: Actor, project_id: int) -> list[Task]:
        """Return every task of a project the actor can see."""
        await self._visible_project(actor, project_id)
        return await self._repository.list_for_project(project_id)

    async def filter_tasks(
        self,
        actor: Actor,
        project_id: int,
        *,
        status: TaskStatus | str | None = None,
        priority: TaskPriority | str | None = None,
    ) -> list[Task]:
        """Filter a project's tasks; an omitted filter places no constraint."""
        await self._visible_project(actor, project_id)
        supplied = {
            name: value
            for name, value in (("status", status), ("priority", priority))
            if value is not None
        }
        cleaned = validate_task_fields(supplied, required=False)
        return await self._repository.list_for_project(
            project_id,
            status=cleaned.get("status"),
            priority=cleaned.get("priority"),
        )

    async def list_tasks_for_member(self, actor: Actor, user_id: int, project_id: int) -> list[Task]:
        """Return a project's tasks as seen through one of its members."""
        await self._visible_project(actor, project_id)
        if await self._memberships.get_pair(project_id, user_id) is None:
            raise NotMemberError()
        return await self._repository.list_for_project(project_id)

    async def latest_task(self, actor: Actor, project_id: int) -> Task:
        await self._visible_project(actor, project_id)
        task = await self._repository.latest_in_project(project_id)
        if task is None:
            raise NotFoundError("No tasks found for this project.")
        return task

    async def oldest_task(self, actor: Actor, project_id: int) -> Task:
        await self._visible_project(actor, project_id)
        task = await self._repository.oldest_in_project(project_id)
        if task is None:
            raise NotFoundError("No tasks found for this project.")
        return task

    async def highest_priority_task(
        self,
        actor: Actor,
        project_id: int,
        *,
        title: str | None = None,
    ) -> Task:
        """Return the newest ``high`` priority task, optionally with ``title``."""
        await self._visible_project(actor, project_id)
        task = await self._repository.highest_priority_in_project(project_id, title)
        if task is None:
            raise NotFoundError("No task found with the highest priority.")
        return task

    async def update_status(
        self,
        actor: Actor,
        task_id: int,
        status: TaskStatus | str,
        *,
        project_id: int | None = None,
    ) -> Task:
        """Overwrite the status field only (developers)."""
        task = await self._require_task(task_id, project_id)
        await self._policy.authorize(actor, Action.UPDATE_TASK_STATUS, task.project_id)
        if status is None:
            raise ValidationError(fields=["status"], errors={"status": "Field is required."})
        cleaned = validate_task_fields({"status": status}, required=False)
        await self._repository.update_fields(task, cleaned)
        await self._session.commit()
        await self._repository.refresh(task)
        logger.info(
            "Task status updated",
            extra={"task_id": task_id, "status": task.status.value, "actor_id": actor.id},
        )
        return task

    async def add_note(
        self,
        actor: Actor,
        task_id: int,
        note: str,
        *,
        project_id: int | None = None,
    ) -> Task:
        """Replace the tester notes wholesale (testers)."""
        task = await self._require_task(task_id, project_id)
        await self._policy.authorize(actor, Action.ADD_TASK_NOTE, task.project_id)
        if not isinstance(note, str) or not note.strip():
            raise ValidationError(
                fields=["tester_notes"],
                errors={"tester_notes": "Note must be a non-empty string."},
            )
        await self._repository.update_fields(task, {"tester_notes": note})
        await self._session.commit()
        await self._repository.refresh(task)
        logger.info("Task note replaced", extra={"task_id": task_id, "actor_id": actor.id})
        return task

    async def update_task(
        self,
        actor: Actor,
        task_id: int,
        changes: Mapping[str, Any],
        *,
        project_id: int | None = None,
    ) -> Task:
        """Apply any subset of title, description, priority, status and due_date."""
        task = await self._require_task(task_id, project_id)
        await self._policy.authorize(actor, Action.EDIT_TASK, task.project_id)
        cleaned = validate_task_fields(changes, required=False)
        if cleaned:
            await self._repository.update_fields(task, cleaned)
            await self._session.commit()
            await self._repository.refresh(task)
        logger.info(
            "Task updated",
            extra={"task_id": task_id, "fields": sorted(cleaned), "actor_id": actor.id},
        )
        return task

    async def delete_task(self, actor: Actor, task_id: int, *, project_id: int | None = None) -> None:
        task = await self._require_task(task_id, project_id)
        await self._policy.authorize(actor, Action.DELETE_TASK, task.project_id)
        await self._repository.delete(task)
        await self._session.commit()
        logger.info("Task deleted", extra={"task_id": task_id, "actor_id": actor.id})


__all__ = ["EDITABLE_FIELDS", "TaskService", "validate_task_fields"]
