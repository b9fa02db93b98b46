"""Membership and project-session schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..models import MemberRole


class MemberAdd(BaseModel):
    """Payload attaching a user to a project with a role."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"user_id": 7, "role": MemberRole.DEVELOPER.value}}
    )

    user_id: int = Field(ge=1)
    role: MemberRole


class MembershipRead(BaseModel):
    """Public representation of a membership and its session state."""

    model_config = ConfigDict(from_attributes=True)

    project_id: int
    user_id: int
    role: MemberRole
    contribution_minutes: int
    login_at: datetime | None = None
    logout_at: datetime | None = None
    last_activity_at: datetime
    is_logged_in: bool


__all__ = ["MemberAdd", "MembershipRead"]
