from __future__ import annotations

import pytest
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub.errors import ForbiddenError, NotFoundError
from taskhub.models import MemberRole, Membership, Project, Task
from taskhub.services import Actor, ProjectService, TaskService, UserService


async def _count(session: AsyncSession, model, **criteria) -> int:
    query = select(model)
    for name, value in criteria.items():
        query = query.where(getattr(model, name) == value)
    result = await session.execute(query)
    return len(result.scalars().all())


async def test_deleting_project_removes_tasks_and_memberships(
    session: AsyncSession, admin, project, make_user, add_member, task_fields
) -> None:
    manager = await make_user()
    await add_member(project, manager, MemberRole.MANAGER)
    tasks = TaskService(session)
    await tasks.create_task(Actor.from_user(manager), project.id, **task_fields)
    await tasks.create_task(Actor.from_user(manager), project.id, **{**task_fields, "title": "T2"})
    projects = ProjectService(session)

    with pytest.raises(ForbiddenError):
        await projects.delete_project(Actor.from_user(manager), project.id)

    project_id = project.id
    await projects.delete_project(Actor.from_user(admin), project_id)

    assert await _count(session, Project, id=project_id) == 0
    assert await _count(session, Task, project_id=project_id) == 0
    assert await _count(session, Membership, project_id=project_id) == 0
    with pytest.raises(NotFoundError):
        await projects.get_project(Actor.from_user(admin), project_id)


async def test_deleting_user_removes_memberships(session: AsyncSession, admin, make_user, add_member) -> None:
    projects = ProjectService(session)
    alpha = await projects.create_project(Actor.from_user(admin), name="Alpha")
    beta = await projects.create_project(Actor.from_user(admin), name="Beta")
    member = await make_user()
    colleague = await make_user()
    await add_member(alpha, member, MemberRole.DEVELOPER)
    await add_member(beta, member, MemberRole.TESTER)
    await add_member(alpha, colleague, MemberRole.MANAGER)
    users = UserService(session)

    with pytest.raises(ForbiddenError):
        await users.delete_user(Actor.from_user(colleague), member.id)

    member_id = member.id
    await users.delete_user(Actor.from_user(admin), member_id)

    assert await users.get_user(member_id) is None
    assert await _count(session, Membership, user_id=member_id) == 0
    assert await _count(session, Membership, user_id=colleague.id) == 1
    with pytest.raises(NotFoundError):
        await users.delete_user(Actor.from_user(admin), member_id)


async def test_project_listing_is_scoped_to_memberships(session: AsyncSession, admin, make_user, add_member) -> None:
    projects = ProjectService(session)
    alpha = await projects.create_project(Actor.from_user(admin), name="Alpha")
    await projects.create_project(Actor.from_user(admin), name="Beta")
    member = await make_user()
    await add_member(alpha, member, MemberRole.TESTER)

    visible = await projects.list_projects_for(Actor.from_user(member))

    assert [project.name for project in visible] == ["Alpha"]
    assert await projects.list_projects_for(Actor.from_user(admin)) == []
