"""Task-related Pydantic schemas."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models import TaskPriority, TaskStatus

TASK_READ_EXAMPLE = {
    "id": 1,
    "project_id": 3,
    "title": "T1",
    "description": "Wire the billing form to the new API.",
    "status": TaskStatus.NEW.value,
    "priority": TaskPriority.HIGH.value,
    "due_date": "2025-01-01",
    "tester_notes": None,
    "created_at": "2024-12-01T12:00:00Z",
    "updated_at": "2024-12-02T08:30:00Z",
}


class TaskCreate(BaseModel):
    """Payload for creating a new task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "T1",
                "status": TaskStatus.NEW.value,
                "priority": TaskPriority.HIGH.value,
                "due_date": "2025-01-01",
            }
        }
    )

    title: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None)
    status: TaskStatus = Field(default=TaskStatus.NEW)
    priority: TaskPriority
    due_date: date


class TaskUpdate(BaseModel):
    """Payload for partially updating an existing task."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "T1 (revised)",
                "priority": TaskPriority.MEDIUM.value,
            }
        }
    )

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None)
    status: TaskStatus | None = Field(default=None)
    priority: TaskPriority | None = Field(default=None)
    due_date: date | None = Field(default=None)

    @model_validator(mode="after")
    def _ensure_payload_not_empty(self) -> "TaskUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update.")
        return self


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskNote(BaseModel):
    tester_notes: str = Field(min_length=1)


class TaskRead(BaseModel):
    """Public representation of a task."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={"example": TASK_READ_EXAMPLE},
    )

    id: int
    project_id: int
    title: str
    description: str | None = None
    status: TaskStatus
    priority: TaskPriority
    due_date: date
    tester_notes: str | None = None
    created_at: datetime
    updated_at: datetime


__all__ = [
    "TaskCreate",
    "TaskNote",
    "TaskRead",
    "TaskStatusUpdate",
    "TaskUpdate",
]
