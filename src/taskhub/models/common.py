"""Shared model mixins and utilities."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def enum_values(enum_type: type[Enum]) -> list[str]:
    """Persist enum members by value rather than by name."""
    return [member.value for member in enum_type]


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps read back from the database as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TimestampMixin(SQLModel, table=False):
    """Mixin that provides created/updated timestamp columns."""

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={
            "server_default": sa.func.now(),
            "onupdate": utcnow,
        },
    )


__all__ = ["TimestampMixin", "ensure_utc", "enum_values", "utcnow"]
