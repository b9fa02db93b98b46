"""Routes for project rosters and project sessions."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from ...deps import ActorDependency, DatabaseSessionDependency
from ...schemas import MemberAdd, MembershipRead
from ...services import MembershipService

router = APIRouter(prefix="/projects/{project_id}", tags=["memberships"])


@router.get("/members", response_model=list[MembershipRead], summary="List project members")
async def list_members(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> list[MembershipRead]:
    memberships = await MembershipService(session).list_members(actor, project_id)
    return [MembershipRead.model_validate(membership) for membership in memberships]


@router.post(
    "/members",
    response_model=MembershipRead,
    status_code=status.HTTP_201_CREATED,
    summary="Attach a user to the project with a role",
)
async def add_member(
    project_id: int,
    payload: MemberAdd,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> MembershipRead:
    membership = await MembershipService(session).add_member(
        actor,
        project_id,
        payload.user_id,
        payload.role,
    )
    return MembershipRead.model_validate(membership)


@router.delete(
    "/members/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Detach a user from the project",
)
async def remove_member(
    project_id: int,
    user_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> Response:
    await MembershipService(session).remove_member(actor, project_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/session/login",
    response_model=MembershipRead,
    summary="Start the caller's working session in the project",
)
async def session_login(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> MembershipRead:
    membership = await MembershipService(session).record_login(actor, project_id)
    return MembershipRead.model_validate(membership)


@router.post(
    "/session/logout",
    response_model=MembershipRead,
    summary="End the caller's working session and accrue its minutes",
)
async def session_logout(
    project_id: int,
    session: DatabaseSessionDependency,
    actor: ActorDependency,
) -> MembershipRead:
    membership = await MembershipService(session).record_logout(actor, project_id)
    return MembershipRead.model_validate(membership)
