from __future__ import annotations

from sqlalchemy import inspect
from sqlalchemy.orm import configure_mappers
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub.models import MemberRole, Membership, Project, Task, User
from taskhub.services import Actor, MembershipService, ProjectService


def test_relationships_resolve_to_mapped_classes() -> None:
    configure_mappers()

    assert inspect(Membership).relationships["project"].mapper.class_ is Project
    assert inspect(Membership).relationships["user"].mapper.class_ is User
    assert inspect(Project).relationships["tasks"].mapper.class_ is Task
    assert inspect(Project).relationships["memberships"].mapper.class_ is Membership
    assert inspect(User).relationships["memberships"].mapper.class_ is Membership


async def test_admin_creates_project_and_member_row_links_back(
    session: AsyncSession, admin, make_user
) -> None:
    created = await ProjectService(session).create_project(Actor.from_user(admin), name="Alpha")
    assert created.id is not None

    user = await make_user()
    await MembershipService(session).add_member(
        Actor.from_user(admin), created.id, user.id, MemberRole.DEVELOPER
    )

    result = await session.execute(select(Membership).where(Membership.project_id == created.id))
    membership = result.scalars().one()
    assert membership.role is MemberRole.DEVELOPER
    assert membership.user_id == user.id
