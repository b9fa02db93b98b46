"""Domain models exposed by the TaskHub service."""

from __future__ import annotations

from .common import TimestampMixin, ensure_utc, utcnow
from .membership import MemberRole, Membership, MembershipBase
from .project import Project, ProjectBase
from .task import Task, TaskBase, TaskPriority, TaskStatus
from .user import User, UserBase

__all__ = [
    "MemberRole",
    "Membership",
    "MembershipBase",
    "Project",
    "ProjectBase",
    "Task",
    "TaskBase",
    "TaskPriority",
    "TaskStatus",
    "TimestampMixin",
    "User",
    "UserBase",
    "ensure_utc",
    "utcnow",
]
