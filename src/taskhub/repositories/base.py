"""Base repository implementation supporting asynchronous SQLModel sessions."""

from __future__ import annotations

from typing import Any, Generic, Mapping, TypeVar

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession

ModelType = TypeVar("ModelType", bound=SQLModel)


class BaseRepository(Generic[ModelType]):
    """Find-by-id, create, update-fields, delete and list for one model type.

    Repositories only flush; committing is left to the calling service so a
    lifecycle operation lands in a single transaction.
    """

    def __init__(self, session: AsyncSession, model_type: type[ModelType]) -> None:
        self._session = session
        self._model_type = model_type

    @property
    def session(self) -> AsyncSession:
        return self._session

    async def get(self, entity_id: int) -> ModelType | None:
        """Retrieve a model instance by its primary key."""
        return await self._session.get(self._model_type, entity_id)

    async def list(self) -> list[ModelType]:
        """Return all entities of the repository type ordered by primary key."""
        primary_key = getattr(self._model_type, "id")
        result = await self._session.execute(select(self._model_type).order_by(primary_key))
        return [*result.scalars().all()]

    async def add(self, instance: ModelType) -> ModelType:
        """Add and flush a new entity instance."""
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def update_fields(self, instance: ModelType, values: Mapping[str, Any]) -> ModelType:
        """Assign ``values`` onto ``instance`` and flush the change."""
        for field_name, value in values.items():
            setattr(instance, field_name, value)
        self._session.add(instance)
        await self._session.flush()
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Delete an entity instance and flush the change."""
        await self._session.delete(instance)
        await self._session.flush()

    async def refresh(self, instance: ModelType) -> ModelType:
        await self._session.refresh(instance)
        return instance
