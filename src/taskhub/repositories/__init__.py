"""Database repositories for encapsulating persistence logic."""

from __future__ import annotations

from .memberships import MembershipRepository
from .projects import ProjectRepository
from .tasks import TaskRepository
from .users import UserRepository

__all__ = ["MembershipRepository", "ProjectRepository", "TaskRepository", "UserRepository"]
