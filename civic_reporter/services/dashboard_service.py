"""Dashboard Service — Aggregation logic for the admin triage dashboard.

Counts are computed from the issues table on every call; nothing is cached.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.repositories.issue_repository import issue_repository
from civic_reporter.services.issue_service import issue_service
from civic_reporter.services.permission_service import Action, Actor, authorize

RECENT_ISSUES_LIMIT: int = 10


class DashboardService:
    """Dashboard aggregation service for the admin dashboard view."""

    async def get_stats(self, db: AsyncSession, actor: Actor) -> dict:
        """Status totals, per-category counts and the most recent reports.

        Returns:
            dict: {total, pending, inProgress, resolved, categoryBreakdown, recentIssues}.
                  categoryBreakdown only lists categories with at least one issue.
        """
        authorize(actor, Action.STATS)

        counts = await issue_repository.count_by_status(db)
        categories = await issue_repository.count_by_category(db)
        recent = await issue_repository.get_recent(db, RECENT_ISSUES_LIMIT)

        return {
            "total": int(counts["total"]),
            "pending": int(counts["pending"]),
            "inProgress": int(counts["in_progress"]),
            "resolved": int(counts["resolved"]),
            "categoryBreakdown": {category: int(count) for category, count in categories.items()},
            "recentIssues": [issue_service.build_summary(issue) for issue in recent],
        }


dashboard_service: DashboardService = DashboardService()
