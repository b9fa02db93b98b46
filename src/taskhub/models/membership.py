"""Project membership: the typed join between users and projects."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .common import TimestampMixin, enum_values, utcnow

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .project import Project
    from .user import User


class MemberRole(str, Enum):
    """Roles a user may hold inside a single project."""

    MANAGER = "manager"
    DEVELOPER = "developer"
    TESTER = "tester"


class MembershipBase(SQLModel, table=False):
    """Role and session-tracking state of one user in one project."""

    project_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    role: MemberRole = Field(
        sa_column=sa.Column(
            sa.Enum(
                MemberRole,
                name="member_role",
                native_enum=False,
                validate_strings=True,
                values_callable=enum_values,
            ),
            nullable=False,
        ),
    )
    contribution_minutes: int = Field(
        default=0,
        sa_column=sa.Column(sa.Integer(), nullable=False, server_default="0"),
    )
    login_at: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    logout_at: datetime | None = Field(
        default=None,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=True),
    )
    last_activity_at: datetime = Field(
        default_factory=utcnow,
        sa_column=sa.Column(sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


class Membership(MembershipBase, TimestampMixin, table=True):
    """Persistent membership row, unique per (project, user)."""

    __tablename__ = "project_memberships"
    __table_args__ = (
        sa.UniqueConstraint("project_id", "user_id", name="uq_project_memberships_project_user"),
        sa.CheckConstraint("contribution_minutes >= 0", name="ck_project_memberships_minutes"),
        sa.Index("ix_project_memberships_user_id", "user_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    project: "Project" = Relationship(back_populates="memberships")
    user: "User" = Relationship(back_populates="memberships")

    @property
    def is_logged_in(self) -> bool:
        return self.login_at is not None


__all__ = ["MemberRole", "Membership", "MembershipBase"]
