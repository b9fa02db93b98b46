"""Domain service layer package."""

from __future__ import annotations

from .auth import AuthService, TokenPair
from .memberships import MembershipService
from .policy import Action, Actor, AuthorizationPolicy
from .projects import ProjectService
from .tasks import TaskService
from .users import UserService

__all__ = [
    "Action",
    "Actor",
    "AuthService",
    "AuthorizationPolicy",
    "MembershipService",
    "ProjectService",
    "TaskService",
    "TokenPair",
    "UserService",
]
