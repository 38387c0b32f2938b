"""Base repository with common CRUD operations."""

from collections.abc import Sequence
from typing import Any, Generic, TypeAlias, TypeVar

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select
from sqlmodel import SQLModel, select

from ..exceptions import EntityNotFoundError

ModelT = TypeVar("ModelT", bound=SQLModel)
FilterValueT: TypeAlias = str | int | float | bool


class BaseRepository(Generic[ModelT]):
    """Base repository providing common database operations.

    ``create``, ``update`` and ``delete`` commit immediately. ``add`` only
    flushes, so it can run inside a caller-owned transaction or savepoint.
    """

    def __init__(self, session: AsyncSession, model_class: type[ModelT]):
        """Initialize repository with session and model class.

        Args:
            session: Database session
            model_class: SQLModel class this repository operates on
        """
        self.session = session
        self.model_class = model_class

    def _filtered(self, statement: Select, **filters: FilterValueT) -> Select:
        for field, value in filters.items():
            if hasattr(self.model_class, field):
                statement = statement.where(getattr(self.model_class, field) == value)
        return statement

    async def get(self, id: Any) -> ModelT:
        """Get entity by ID or raise EntityNotFoundError.

        Args:
            id: Entity ID

        Returns:
            Found entity

        Raises:
            EntityNotFoundError: If entity doesn't exist
        """
        entity = await self.session.get(self.model_class, id)
        if not entity:
            raise EntityNotFoundError(f"{self.model_class.__name__} with ID {id} not found")
        return entity

    async def get_optional(self, id: Any) -> ModelT | None:
        """Get entity by ID or return None."""
        return await self.session.get(self.model_class, id)

    async def get_by(self, **filters: FilterValueT) -> ModelT | None:
        """Get single entity by filters.

        Args:
            **filters: Field-value pairs to filter by

        Returns:
            Found entity or None
        """
        statement = self._filtered(select(self.model_class), **filters)
        result = await self.session.execute(statement)
        return result.scalars().first()

    async def exists(self, **filters: FilterValueT) -> bool:
        """Check if entity exists with given filters."""
        return await self.count(**filters) > 0

    async def list_all(self, **filters: FilterValueT) -> Sequence[ModelT]:
        """List all entities matching filters.

        Args:
            **filters: Field-value pairs to filter by

        Returns:
            List of all matching entities
        """
        statement = self._filtered(select(self.model_class), **filters)
        result = await self.session.execute(statement)
        return result.scalars().all()

    async def count(self, **filters: FilterValueT) -> int:
        """Count entities matching filters.

        Args:
            **filters: Field-value pairs to filter by

        Returns:
            Number of matching entities
        """
        statement = self._filtered(select(func.count()).select_from(self.model_class), **filters)
        result = await self.session.execute(statement)
        return result.scalar() or 0

    async def add(self, entity: ModelT) -> ModelT:
        """Add entity to the current transaction and flush it without committing.

        Args:
            entity: Entity to stage

        Returns:
            The flushed entity, with generated keys populated
        """
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def create(self, entity: ModelT) -> ModelT:
        """Create new entity.

        Args:
            entity: Entity to create

        Returns:
            Created entity with refreshed data
        """
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def update(
        self, entity: ModelT, update_data: dict[str, Any], exclude_unset: bool = True
    ) -> ModelT:
        """Update entity with given data.

        Args:
            entity: Entity to update
            update_data: Dictionary with fields to update
            exclude_unset: Whether to exclude unset values

        Returns:
            Updated entity
        """
        for field, value in update_data.items():
            if exclude_unset and value is None:
                continue
            if hasattr(entity, field):
                setattr(entity, field, value)

        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity: ModelT) -> None:
        """Delete entity."""
        await self.session.delete(entity)
        await self.session.commit()

    async def refresh(self, entity: ModelT, attribute_names: list[str] | None = None) -> ModelT:
        """Refresh entity from database.

        Args:
            entity: Entity to refresh
            attribute_names: Optional list of attributes to refresh

        Returns:
            Refreshed entity
        """
        await self.session.refresh(entity, attribute_names)
        return entity
