"""Base Repository — shared lookups and writes for the domain repositories.

Writes only flush; committing is the caller's job, so one request stays
one unit of work.
"""

from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Primary-key lookup, insert and delete for one mapped model.

    Attributes:
        model: The SQLAlchemy model class
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    async def get_by_id(self, db: AsyncSession, record_id: UUID) -> ModelType | None:
        query: Select = select(self.model).where(self.model.id == record_id)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """Insert a row built from ``obj_data``.

        The flush assigns the primary key and column defaults, so the
        returned object can be serialized before the commit.
        """
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        return db_obj

    async def delete(self, db: AsyncSession, db_obj: ModelType) -> None:
        """Delete a loaded row; ORM cascades (e.g. status history) apply."""
        await db.delete(db_obj)
        await db.flush()
