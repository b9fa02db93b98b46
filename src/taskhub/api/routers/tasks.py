"""Routes handling the task lifecycle inside a project."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Response, status

from ...deps import ActorDependency, DatabaseSessionDependency
from ...models import Task, TaskPriority, TaskStatus
from ...schemas import TaskCreate, TaskNote, TaskRead, TaskStatusUpdate, TaskUpdate
from ...services import TaskService

router = APIRouter(prefix="/projects/{project_id}/tasks", tags=["tasks"])

StatusQuery = Annotated[
    TaskStatus | None,
    Query(description="Restrict results to tasks with this status."),
]
PriorityQuery = Annotated[
    TaskPriority | None,
    Query(description="Restrict results to tasks with this priority."),
]
TitleQuery = Annotated[
    str | None,
    Query(max_length=255, description="Only consider tasks with exactly this title."),
]


def _map_task(task: Task) -> TaskRead:
    return TaskRead.model_validate(task)


@router.get("", response_model=list[TaskRead], summary="List the project's tasks")
async def list_tasks(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> list[TaskRead]:
    tasks = await TaskService(session).list_tasks(actor, project_id)
    return [_map_task(task) for task in tasks]


@router.post(
    "",
    response_model=TaskRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task in the project",
)
async def create_task(
    project_id: int,
    payload: TaskCreate,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> TaskRead:
    task = await TaskService(session).create_task(
        actor,
        project_id,
        title=payload.title,
        description=payload.description,
        status=payload.status,
        priority=payload.priority,
        due_date=payload.due_date,
    )
    return _map_task(task)


@router.get(
    "/filter",
    response_model=list[TaskRead],
    summary="Filter tasks by status and/or priority",
)
async def filter_tasks(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
    status: StatusQuery = None,
    priority: PriorityQuery = None,
) -> list[TaskRead]:
    tasks = await TaskService(session).filter_tasks(
        actor,
        project_id,
        status=status,
        priority=priority,
    )
    return [_map_task(task) for task in tasks]


@router.get("/latest", response_model=TaskRead, summary="Most recently created task")
async def latest_task(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> TaskRead:
    return _map_task(await TaskService(session).latest_task(actor, project_id))


@router.get("/oldest", response_model=TaskRead, summary="Earliest created task")
async def oldest_task(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> TaskRead:
    return _map_task(await TaskService(session).oldest_task(actor, project_id))


@router.get(
    "/highest-priority",
    response_model=TaskRead,
    summary="Newest high-priority task, optionally matching a title",
)
async def highest_priority_task(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
    title: TitleQuery = None,
) -> TaskRead:
    task = await TaskService(session).highest_priority_task(actor, project_id, title=title)
    return _map_task(task)


@router.get("/{task_id}", response_model=TaskRead, summary="Retrieve a task")
async def get_task(
    project_id: int,
    task_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> TaskRead:
    task = await TaskService(session).get_task(actor, task_id, project_id=project_id)
    return _map_task(task)


@router.patch("/{task_id}", response_model=TaskRead, summary="Edit task fields")
async def update_task(
    project_id: int,
    task_id: int,
    payload: TaskUpdate,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> TaskRead:
    task = await TaskService(session).update_task(
        actor,
        task_id,
        payload.model_dump(exclude_unset=True),
        project_id=project_id,
    )
    return _map_task(task)


@router.put("/{task_id}/status", response_model=TaskRead, summary="Move a task to a new status")
async def update_task_status(
    project_id: int,
    task_id: int,
    payload: TaskStatusUpdate,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> TaskRead:
    task = await TaskService(session).update_status(
        actor,
        task_id,
        payload.status,
        project_id=project_id,
    )
    return _map_task(task)


@router.post("/{task_id}/note", response_model=TaskRead, summary="Replace the tester notes")
async def add_task_note(
    project_id: int,
    task_id: int,
    payload: TaskNote,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> TaskRead:
    task = await TaskService(session).add_note(
        actor,
        task_id,
        payload.tester_notes,
        project_id=project_id,
    )
    return _map_task(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a task",
)
async def delete_task(
    project_id: int,
    task_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> Response:
    await TaskService(session).delete_task(actor, task_id, project_id=project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
