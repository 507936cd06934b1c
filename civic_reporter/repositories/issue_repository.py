"""Issue repository — Handles issues / issue_status_history DB queries."""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.models.issue import Issue, IssueStatus
from civic_reporter.repositories.base import BaseRepository
from civic_reporter.schemas.issue import IssueFilters


class IssueRepository(BaseRepository[Issue]):

    def __init__(self) -> None:
        super().__init__(Issue)

    async def get_with_history(
        self,
        db: AsyncSession,
        issue_id: UUID,
        for_update: bool = False,
    ) -> Issue | None:
        """Point lookup with the status history loaded.

        ``for_update`` locks the row for the read-modify-write operations
        (status, notes, delete) on backends that support SELECT ... FOR UPDATE.
        """
        query: Select = (
            select(Issue)
            .where(Issue.id == issue_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def get_by_reporter(
        self,
        db: AsyncSession,
        reporter_id: UUID,
    ) -> Sequence[Issue]:
        query: Select = (
            select(Issue)
            .where(Issue.reporter_id == reporter_id)
            .order_by(Issue.created_at.desc())
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def get_filtered(
        self,
        db: AsyncSession,
        filters: IssueFilters,
    ) -> Sequence[Issue]:
        """Conjunction of the given predicates; ``search`` is a disjunction over title/description."""
        query: Select = select(Issue).order_by(Issue.created_at.desc())

        if filters.status:
            query = query.where(Issue.status == filters.status)
        if filters.category:
            query = query.where(Issue.category == filters.category)
        if filters.search:
            query = query.where(
                or_(
                    Issue.title.icontains(filters.search, autoescape=True),
                    Issue.description.icontains(filters.search, autoescape=True),
                )
            )
        if filters.start_date is not None:
            query = query.where(Issue.created_at >= filters.start_date)
        if filters.end_date is not None:
            query = query.where(Issue.created_at <= filters.end_date)

        result = await db.execute(query)
        return result.scalars().all()

    async def count_by_status(self, db: AsyncSession) -> dict[str, int]:
        query: Select = select(
            func.count(Issue.id).label("total"),
            func.sum(case((Issue.status == IssueStatus.PENDING.value, 1), else_=0)).label("pending"),
            func.sum(case((Issue.status == IssueStatus.IN_PROGRESS.value, 1), else_=0)).label("in_progress"),
            func.sum(case((Issue.status == IssueStatus.RESOLVED.value, 1), else_=0)).label("resolved"),
        )
        row = (await db.execute(query)).one()
        return {
            "total": row.total or 0,
            "pending": row.pending or 0,
            "in_progress": row.in_progress or 0,
            "resolved": row.resolved or 0,
        }

    async def count_by_category(self, db: AsyncSession) -> dict[str, int]:
        query: Select = (
            select(Issue.category, func.count(Issue.id))
            .group_by(Issue.category)
            .order_by(Issue.category)
        )
        result = await db.execute(query)
        return {category: count for category, count in result.all()}

    async def get_recent(self, db: AsyncSession, limit: int = 10) -> Sequence[Issue]:
        query: Select = select(Issue).order_by(Issue.created_at.desc()).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()


issue_repository: IssueRepository = IssueRepository()
