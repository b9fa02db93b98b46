"""Task domain models built with SQLModel."""

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING

import sqlalchemy as sa
from sqlmodel import Field, Relationship, SQLModel

from .common import TimestampMixin, enum_values

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from .project import Project


class TaskStatus(str, Enum):
    """Enumeration of possible task states."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskPriority(str, Enum):
    """Enumeration of task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskBase(SQLModel, table=False):
    """Shared attributes for task models."""

    title: str = Field(
        max_length=255,
        sa_column=sa.Column(sa.String(length=255), nullable=False),
    )
    description: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    status: TaskStatus = Field(
        default=TaskStatus.NEW,
        sa_column=sa.Column(
            sa.Enum(
                TaskStatus,
                name="task_status",
                native_enum=False,
                validate_strings=True,
                values_callable=enum_values,
            ),
            nullable=False,
            server_default=TaskStatus.NEW.value,
        ),
    )
    priority: TaskPriority = Field(
        sa_column=sa.Column(
            sa.Enum(
                TaskPriority,
                name="task_priority",
                native_enum=False,
                validate_strings=True,
                values_callable=enum_values,
            ),
            nullable=False,
        ),
    )
    due_date: date = Field(sa_column=sa.Column(sa.Date(), nullable=False))
    tester_notes: str | None = Field(
        default=None,
        sa_column=sa.Column(sa.Text(), nullable=True),
    )
    project_id: int = Field(
        sa_column=sa.Column(
            sa.Integer(),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )


class Task(TaskBase, TimestampMixin, table=True):
    """Persistent task model."""

    __tablename__ = "tasks"
    __table_args__ = (
        sa.CheckConstraint("length(title) > 0", name="ck_tasks_title_length"),
        sa.Index("ix_tasks_project_id", "project_id"),
    )

    id: int | None = Field(default=None, primary_key=True)
    project: "Project" = Relationship(back_populates="tasks")


__all__ = ["Task", "TaskBase", "TaskPriority", "TaskStatus"]
