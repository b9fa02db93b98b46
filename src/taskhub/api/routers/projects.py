"""Routes handling project administration."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from ...deps import ActorDependency, DatabaseSessionDependency
from ...schemas import ProjectCreate, ProjectRead, ProjectUpdate
from ...services import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectRead], summary="List the caller's projects")
async def list_projects(
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> list[ProjectRead]:
    projects = await ProjectService(session).list_projects_for(actor)
    return [ProjectRead.model_validate(project) for project in projects]


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
)
async def create_project(
    payload: ProjectCreate,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> ProjectRead:
    project = await ProjectService(session).create_project(
        actor,
        name=payload.name,
        description=payload.description,
    )
    return ProjectRead.model_validate(project)


@router.get("/{project_id}", response_model=ProjectRead, summary="Retrieve a project")
async def get_project(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> ProjectRead:
    project = await ProjectService(session).get_project(actor, project_id)
    return ProjectRead.model_validate(project)


@router.patch("/{project_id}", response_model=ProjectRead, summary="Update a project")
async def update_project(
    project_id: int,
    payload: ProjectUpdate,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> ProjectRead:
    project = await ProjectService(session).update_project(
        actor,
        project_id,
        payload.model_dump(exclude_unset=True),
    )
    return ProjectRead.model_validate(project)


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a project with its tasks and memberships",
)
async def delete_project(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> Response:
    await ProjectService(session).delete_project(actor, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
