"""Generic async repository parameterized by model type."""

from typing import Any, Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from invest_tracker.core.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class CRUDBase(Generic[ModelType]):
    """
    Basic reads and writes for one model.

    Writes flush but never commit; the calling service owns the unit of work
    so a ledger write and its reconciliation land in one database transaction.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: UUID) -> Optional[ModelType]:
        """Get a row by primary key."""
        result = await db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_where(
        self, db: AsyncSession, *criteria: Any, for_update: bool = False
    ) -> Optional[ModelType]:
        """Get the single row matching all criteria, optionally row-locked."""
        stmt = select(self.model).where(*criteria)
        if for_update:
            stmt = stmt.with_for_update()
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, **values: Any) -> ModelType:
        obj = self.model(**values)
        db.add(obj)
        await db.flush()
        return obj

    async def update(self, db: AsyncSession, obj: ModelType, **values: Any) -> ModelType:
        """Set the given attributes and flush."""
        for field, value in values.items():
            setattr(obj, field, value)
        await db.flush()
        return obj

    async def delete(self, db: AsyncSession, obj: ModelType) -> None:
        await db.delete(obj)
        await db.flush()
