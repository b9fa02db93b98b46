"""Project domain models built with SQLModel."""

from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .common import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .membership import Membership
    from .task import Task


class ProjectBase(SQLModel, table=False):
    """Shared attributes for project models."""

    name: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )


class Project(ProjectBase, TimestampMixin, table=True):
    """Persistent project model. Owns its tasks and memberships."""

    __tablename__ = "projects"

    id: int | None = Field(default=None, primary_key=True)
    tasks: list["Task"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "passive_deletes": True},
    )
    memberships: list["Membership"] = Relationship(
        back_populates="project",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "passive_deletes": True},
    )


__all__ = ["Project", "ProjectBase"]
