"""Admin Dashboard Router — aggregate counts for the triage dashboard."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.api.deps import require_admin
from civic_reporter.database import get_db
from civic_reporter.services.dashboard_service import dashboard_service
from civic_reporter.services.permission_service import Actor

router: APIRouter = APIRouter()


@router.get("/stats")
async def get_stats(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> dict:
    """Status totals, per-category counts and the ten most recent issues."""
    stats = await dashboard_service.get_stats(db, actor)
    return {"success": True, "stats": stats}
