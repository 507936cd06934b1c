"""Citizen Issue Router — report, list, read, track and delete issues.

Any authenticated user can report issues and manage their own; tracking by
id is public and never exposes admin notes.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from civic_reporter.api.deps import get_actor
from civic_reporter.database import get_db
from civic_reporter.services.issue_service import ReadMode, issue_service
from civic_reporter.services.permission_service import Actor
from civic_reporter.services.storage_service import StoredImage, storage_service
from civic_reporter.utils.exceptions import ValidationError

router: APIRouter = APIRouter()


async def _read_report(request: Request) -> tuple[dict[str, Any], UploadFile | None]:
    """Report fields and the optional photo from a multipart form or a JSON body."""
    content_type: str = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("Malformed JSON body")
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return body, None

    form = await request.form()
    fields = {key: value for key, value in form.items() if not isinstance(value, UploadFile)}
    upload = form.get("image")
    if isinstance(upload, UploadFile) and upload.filename:
        return fields, upload
    return fields, None


@router.post("", status_code=201)
async def create_issue(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> dict:
    """Report a new issue, optionally with one photo in the ``image`` field."""
    fields, upload = await _read_report(request)

    image: StoredImage | None = None
    if upload is not None:
        # Size comes from the parsed form, before the body is read into memory
        if upload.size is not None:
            storage_service.check_size(upload.size)
        data: bytes = await upload.read()
        image = await run_in_threadpool(storage_service.store, data, upload.filename, upload.content_type)

    issue = await issue_service.create_issue(
        db,
        actor,
        title=fields.get("title"),
        description=fields.get("description"),
        category=fields.get("category"),
        location=fields.get("location"),
        address=fields.get("address"),
        image=image,
    )
    return {
        "success": True,
        "message": "Issue reported successfully",
        "issue": issue_service.build_response(issue),
    }


@router.get("/my-issues")
async def list_my_issues(
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> dict:
    """Issues reported by the caller, newest first."""
    issues = await issue_service.list_mine(db, actor)
    return {
        "success": True,
        "count": len(issues),
        "issues": [issue_service.build_response(i) for i in issues],
    }


@router.get("/track/{issue_id}")
async def track_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict:
    """Public tracking. No authentication; admin notes are stripped."""
    issue = await issue_service.get_issue(db, None, issue_id, ReadMode.PUBLIC)
    return {"success": True, "issue": issue_service.build_response(issue, include_admin_notes=False)}


@router.get("/{issue_id}")
async def get_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> dict:
    """Issue detail for its reporter (or an admin)."""
    issue = await issue_service.get_issue(db, actor, issue_id, ReadMode.OWNER)
    return {"success": True, "issue": issue_service.build_response(issue)}


@router.delete("/{issue_id}")
async def delete_issue(
    issue_id: UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
    actor: Annotated[Actor, Depends(get_actor)],
) -> dict:
    """Delete an issue as its reporter (or an admin)."""
    await issue_service.delete_issue(db, actor, issue_id)
    await db.commit()
    return {"success": True, "message": "Issue deleted successfully"}
