"""Routes exposing user accounts."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from ...deps import ActorDependency, CurrentUserDependency, DatabaseSessionDependency
from ...schemas import TaskRead, UserPublic
from ...services import TaskService, UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserPublic, summary="Return the authenticated user")
async def read_current_user(current_user: CurrentUserDependency) -> UserPublic:
    return UserPublic.model_validate(current_user)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a user and their memberships",
)
async def delete_user(
    user_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> Response:
    await UserService(session).delete_user(actor, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{user_id}/projects/{project_id}/tasks",
    response_model=list[TaskRead],
    summary="List a project's tasks as seen through one of its members",
)
async def list_member_tasks(
    user_id: int,
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> list[TaskRead]:
    tasks = await TaskService(session).list_tasks_for_member(actor, user_id, project_id)
    return [TaskRead.model_validate(task) for task in tasks]
