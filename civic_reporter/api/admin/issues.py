"""Admin Issue Router — triage list, detail, status, notes and delete.

Every endpoint requires the admin role; ``require_admin`` rejects
citizens before the handler runs.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.api.deps import require_admin
from civic_reporter.database import get_db
from civic_reporter.schemas.issue import IssueFilters, NotesUpdate, StatusUpdate
from civic_reporter.services.issue_service import ReadMode, issue_service
from civic_reporter.services.permission_service import Actor

router: APIRouter = APIRouter()


@router.get("")
async def list_issues(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
    status: Annotated[str | None, Query()] = None,
    category: Annotated[str | None, Query()] = None,
    search: Annotated[str | None, Query()] = None,
    start_date: Annotated[str | None, Query(alias="startDate")] = None,
    end_date: Annotated[str | None, Query(alias="endDate")] = None,
) -> dict:
    """All issues matching the given filters, newest first."""
    filters = IssueFilters.from_query(status, category, search, start_date, end_date)
    issues = await issue_service.list_filtered(db, actor, filters)
    return {
        "success": True,
        "count": len(issues),
        "issues": [issue_service.build_response(i) for i in issues],
    }


@router.get("/{issue_id}")
async def get_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> dict:
    issue = await issue_service.get_issue(db, actor, issue_id, ReadMode.ADMIN)
    return {"success": True, "issue": await issue_service.build_admin_response(db, issue)}


@router.patch("/{issue_id}/status")
async def update_issue_status(
    issue_id: UUID,
    data: StatusUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> dict:
    """Move an issue to a new status and record it in the history."""
    issue = await issue_service.transition_status(db, actor, issue_id, data.status)
    await db.commit()
    return {
        "success": True,
        "message": "Issue status updated successfully",
        "issue": issue_service.build_response(issue),
    }


@router.patch("/{issue_id}/notes")
async def update_admin_notes(
    issue_id: UUID,
    data: NotesUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> dict:
    """Replace the internal notes of an issue."""
    issue = await issue_service.set_admin_notes(db, actor, issue_id, data.notes)
    await db.commit()
    return {
        "success": True,
        "message": "Admin notes added successfully",
        "issue": issue_service.build_response(issue),
    }


@router.delete("/{issue_id}")
async def delete_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(require_admin)],
) -> dict:
    await issue_service.delete_issue(db, actor, issue_id)
    await db.commit()
    return {"success": True, "message": "Issue deleted successfully"}
