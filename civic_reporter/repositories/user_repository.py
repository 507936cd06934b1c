"""User Repository — identity store lookups."""

from typing import Iterable
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.models.user import User
from civic_reporter.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        """Retrieve a user by email (case-insensitive; emails are stored lower-cased)."""
        query: Select = select(User).where(User.email == email.strip().lower())
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_ids(self, db: AsyncSession, user_ids: Iterable[UUID]) -> dict[UUID, User]:
        """Users keyed by id. Ids with no matching row are absent from the result."""
        ids: set[UUID] = set(user_ids)
        if not ids:
            return {}
        query: Select = select(User).where(User.id.in_(ids))
        result = await db.execute(query)
        return {user.id: user for user in result.scalars().all()}


user_repository: UserRepository = UserRepository()
