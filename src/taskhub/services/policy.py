"""Authorization policy: who may perform which action inside a project.

Every decision is a pure function of the action, the actor's global admin
flag and the actor's role in the target project. Admin is an orthogonal flag,
not a superset of the project roles: it only grants what the table says.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from sqlmodel.ext.asyncio.session import AsyncSession

from ..errors import ForbiddenError
from ..models import MemberRole, User
from ..repositories import MembershipRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Actor:
    """Already-authenticated identity presented with every service call."""

    id: int
    is_admin: bool = False

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        if user.id is None:
            raise ValueError("User must be persisted before acting.")
        return cls(id=user.id, is_admin=bool(user.is_admin))


class Action(str, Enum):
    CREATE_PROJECT = "create_project"
    UPDATE_PROJECT = "update_project"
    DELETE_PROJECT = "delete_project"
    VIEW_PROJECTS = "view_projects"
    VIEW_PROJECT = "view_project"
    VIEW_TASKS = "view_tasks"
    CREATE_TASK = "create_task"
    EDIT_TASK = "edit_task"
    UPDATE_TASK_STATUS = "update_task_status"
    ADD_TASK_NOTE = "add_task_note"
    DELETE_TASK = "delete_task"
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"
    PROJECT_SESSION = "project_session"
    DELETE_USER = "delete_user"


@dataclass(frozen=True, slots=True)
class PolicyRule:
    admin: bool = False
    roles: frozenset[MemberRole] = field(default_factory=frozenset)
    any_authenticated: bool = False


ANY_ROLE = frozenset(MemberRole)
_MANAGER = frozenset({MemberRole.MANAGER})

POLICY_TABLE: dict[Action, PolicyRule] = {
    Action.CREATE_PROJECT: PolicyRule(admin=True),
    Action.UPDATE_PROJECT: PolicyRule(admin=True),
    Action.DELETE_PROJECT: PolicyRule(admin=True),
    Action.VIEW_PROJECTS: PolicyRule(any_authenticated=True),
    Action.VIEW_PROJECT: PolicyRule(admin=True, roles=ANY_ROLE),
    Action.VIEW_TASKS: PolicyRule(admin=True, roles=ANY_ROLE),
    Action.CREATE_TASK: PolicyRule(admin=True, roles=_MANAGER),
    Action.EDIT_TASK: PolicyRule(admin=True, roles=_MANAGER),
    # No admin override for status changes; only developers move tasks along.
    Action.UPDATE_TASK_STATUS: PolicyRule(roles=frozenset({MemberRole.DEVELOPER})),
    Action.ADD_TASK_NOTE: PolicyRule(roles=frozenset({MemberRole.TESTER})),
    Action.DELETE_TASK: PolicyRule(admin=True, roles=_MANAGER),
    Action.ADD_MEMBER: PolicyRule(admin=True),
    Action.REMOVE_MEMBER: PolicyRule(admin=True),
    Action.PROJECT_SESSION: PolicyRule(roles=ANY_ROLE),
    Action.DELETE_USER: PolicyRule(admin=True),
}


def is_permitted(action: Action, *, is_admin: bool, role: MemberRole | None) -> bool:
    """Decide ``action`` for an actor with the given admin flag and project role."""

    rule = POLICY_TABLE[action]
    if rule.any_authenticated:
        return True
    if is_admin and rule.admin:
        return True
    return role is not None and role in rule.roles


class AuthorizationPolicy:
    """Resolves the actor's project role and applies ``POLICY_TABLE``."""

    def __init__(self, session: AsyncSession) -> None:
        self._memberships = MembershipRepository(session)

    async def role_of(self, actor: Actor, project_id: int) -> MemberRole | None:
        membership = await self._memberships.get_pair(project_id, actor.id)
        return membership.role if membership is not None else None

    async def can_perform(self, actor: Actor, action: Action, project_id: int | None = None) -> bool:
        rule = POLICY_TABLE[action]
        if rule.any_authenticated or (actor.is_admin and rule.admin):
            return True
        role = None
        if project_id is not None and rule.roles:
            role = await self.role_of(actor, project_id)
        return is_permitted(action, is_admin=actor.is_admin, role=role)

    async def authorize(self, actor: Actor, action: Action, project_id: int | None = None) -> None:
        """Raise ``ForbiddenError`` unless ``actor`` may perform ``action``."""

        if await self.can_perform(actor, action, project_id):
            return
        logger.warning(
            "Authorization denied",
            extra={"actor_id": actor.id, "action": action.value, "project_id": project_id},
        )
        raise ForbiddenError(f"Not permitted to {action.value.replace('_', ' ')}.")


__all__ = [
    "ANY_ROLE",
    "Action",
    "Actor",
    "AuthorizationPolicy",
    "POLICY_TABLE",
    "PolicyRule",
    "is_permitted",
]
