"""Pydantic schemas for public interfaces."""

from __future__ import annotations

from .auth import AuthResponse, AuthTokens, RefreshRequest, RegisterRequest, TokenPayload
from .membership import MemberAdd, MembershipRead
from .project import ProjectCreate, ProjectRead, ProjectUpdate
from .system import ErrorResponse, HealthCheckResponse, MessageResponse, RootResponse
from .task import TaskCreate, TaskNote, TaskRead, TaskStatusUpdate, TaskUpdate
from .user import UserPublic

__all__ = [
    "AuthResponse",
    "AuthTokens",
    "ErrorResponse",
    "HealthCheckResponse",
    "MemberAdd",
    "MembershipRead",
    "MessageResponse",
    "ProjectCreate",
    "ProjectRead",
    "ProjectUpdate",
    "RefreshRequest",
    "RegisterRequest",
    "RootResponse",
    "TaskCreate",
    "TaskNote",
    "TaskRead",
    "TaskStatusUpdate",
    "TaskUpdate",
    "TokenPayload",
    "UserPublic",
]
