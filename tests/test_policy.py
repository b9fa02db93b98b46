from __future__ import annotations

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub.errors import ForbiddenError
from taskhub.models import MemberRole
from taskhub.services import Action, Actor, AuthorizationPolicy
from taskhub.services.policy import POLICY_TABLE, is_permitted

ROLES: list[MemberRole | None] = [None, *MemberRole]


@pytest.mark.parametrize(
    ("action", "is_admin", "role", "expected"),
    [
        (Action.UPDATE_TASK_STATUS, False, MemberRole.DEVELOPER, True),
        (Action.UPDATE_TASK_STATUS, False, MemberRole.MANAGER, False),
        (Action.UPDATE_TASK_STATUS, False, MemberRole.TESTER, False),
        (Action.UPDATE_TASK_STATUS, True, None, False),
        (Action.ADD_TASK_NOTE, False, MemberRole.TESTER, True),
        (Action.ADD_TASK_NOTE, False, MemberRole.DEVELOPER, False),
        (Action.ADD_TASK_NOTE, True, None, False),
        (Action.CREATE_TASK, False, MemberRole.MANAGER, True),
        (Action.CREATE_TASK, True, None, True),
        (Action.CREATE_TASK, False, MemberRole.DEVELOPER, False),
        (Action.EDIT_TASK, False, MemberRole.TESTER, False),
        (Action.DELETE_TASK, False, MemberRole.MANAGER, True),
        (Action.VIEW_TASKS, False, MemberRole.TESTER, True),
        (Action.VIEW_TASKS, False, None, False),
        (Action.VIEW_TASKS, True, None, True),
        (Action.VIEW_PROJECTS, False, None, True),
        (Action.PROJECT_SESSION, False, MemberRole.DEVELOPER, True),
        (Action.PROJECT_SESSION, True, None, False),
        (Action.ADD_MEMBER, False, MemberRole.MANAGER, False),
        (Action.ADD_MEMBER, True, None, True),
    ],
)
def test_policy_decisions(action: Action, is_admin: bool, role: MemberRole | None, expected: bool) -> None:
    assert is_permitted(action, is_admin=is_admin, role=role) is expected


@pytest.mark.parametrize("action", [Action.CREATE_PROJECT, Action.UPDATE_PROJECT, Action.DELETE_PROJECT])
@pytest.mark.parametrize("role", ROLES)
def test_non_admin_can_never_administer_projects(action: Action, role: MemberRole | None) -> None:
    assert is_permitted(action, is_admin=False, role=role) is False
    assert is_permitted(action, is_admin=True, role=role) is True


def test_every_action_has_a_rule() -> None:
    assert set(POLICY_TABLE) == set(Action)


async def test_authorize_resolves_project_role(session: AsyncSession, project, make_user, add_member) -> None:
    developer = await make_user(name="Dev")
    outsider = await make_user(name="Outsider")
    await add_member(project, developer, MemberRole.DEVELOPER)
    policy = AuthorizationPolicy(session)

    assert await policy.role_of(Actor.from_user(developer), project.id) is MemberRole.DEVELOPER
    assert await policy.role_of(Actor.from_user(outsider), project.id) is None

    await policy.authorize(Actor.from_user(developer), Action.UPDATE_TASK_STATUS, project.id)
    with pytest.raises(ForbiddenError):
        await policy.authorize(Actor.from_user(developer), Action.CREATE_TASK, project.id)
    with pytest.raises(ForbiddenError):
        await policy.authorize(Actor.from_user(outsider), Action.VIEW_TASKS, project.id)
