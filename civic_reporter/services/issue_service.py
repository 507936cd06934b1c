"""Issue service — the issue lifecycle engine.

Owns status transitions and their append-only history, admin notes, reads in
owner/admin/public mode, deletion with photo cleanup, and the triage list.
Every operation consults ``permission_service.authorize`` before it mutates
anything. The service keeps no state between calls.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Sequence
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from civic_reporter.models.issue import ISSUE_STATUSES, Issue, IssueStatus, IssueStatusHistory
from civic_reporter.repositories.issue_repository import issue_repository
from civic_reporter.repositories.user_repository import user_repository
from civic_reporter.schemas.issue import IssueCreate, IssueFilters, parse_location, validation_message
from civic_reporter.services.permission_service import Action, Actor, authorize
from civic_reporter.services.storage_service import StoredImage, storage_service
from civic_reporter.utils.exceptions import DependencyError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ReadMode(str, Enum):
    """How an issue is being read.

    owner: reporter (or admin) via the citizen API
    admin: admin triage view
    public: anonymous tracking, admin notes stripped
    """

    OWNER = "owner"
    ADMIN = "admin"
    PUBLIC = "public"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IssueService:

    def build_response(self, issue: Issue, include_admin_notes: bool = True) -> dict:
        data: dict[str, Any] = {
            "id": str(issue.id),
            "title": issue.title,
            "description": issue.description,
            "category": issue.category,
            "location": {
                "latitude": issue.latitude,
                "longitude": issue.longitude,
                "address": issue.address,
            },
            "image": {
                "url": issue.image_url,
                "storageId": issue.image_storage_id,
            },
            "status": issue.status,
            "reportedBy": self._reporter(issue),
            "statusHistory": [
                {
                    "status": entry.status,
                    "updatedAt": entry.updated_at,
                    "updatedBy": str(entry.updated_by) if entry.updated_by else None,
                }
                for entry in issue.status_history
            ],
            "createdAt": issue.created_at,
            "updatedAt": issue.updated_at,
        }
        if include_admin_notes:
            data["adminNotes"] = issue.admin_notes
        return data

    async def build_admin_response(self, db: AsyncSession, issue: Issue) -> dict:
        """Full view with each history ``updatedBy`` resolved to the admin's id, name and email.

        Entries whose user no longer exists resolve to None. ``reportedBy``
        stays the snapshot taken at report time.
        """
        data: dict[str, Any] = self.build_response(issue)
        users = await user_repository.get_by_ids(
            db, (entry.updated_by for entry in issue.status_history if entry.updated_by)
        )
        for item, entry in zip(data["statusHistory"], issue.status_history):
            user = users.get(entry.updated_by) if entry.updated_by else None
            item["updatedBy"] = (
                {"id": str(user.id), "name": user.name, "email": user.email} if user else None
            )
        return data

    def build_summary(self, issue: Issue) -> dict:
        """Dashboard projection without description, notes or history."""
        return {
            "id": str(issue.id),
            "title": issue.title,
            "category": issue.category,
            "status": issue.status,
            "createdAt": issue.created_at,
            "reportedBy": self._reporter(issue),
        }

    def _reporter(self, issue: Issue) -> dict:
        return {
            "userId": str(issue.reporter_id),
            "name": issue.reporter_name,
            "email": issue.reporter_email,
        }

    async def _get_or_404(self, db: AsyncSession, issue_id: UUID, for_update: bool = False) -> Issue:
        issue = await issue_repository.get_with_history(db, issue_id, for_update=for_update)
        if issue is None:
            raise NotFoundError("Issue not found")
        return issue

    def _validate_create(
        self,
        title: Any,
        description: Any,
        category: Any,
        location: Any,
        address: str | None,
    ) -> IssueCreate:
        if not title or not description or not category or location in (None, ""):
            raise ValidationError("Please provide all required fields")

        location = parse_location(location)
        if isinstance(location, dict) and address and not location.get("address"):
            location = {**location, "address": address}

        try:
            return IssueCreate(
                title=title,
                description=description,
                category=category,
                location=location,
            )
        except PydanticValidationError as exc:
            raise ValidationError(validation_message(exc))

    async def _discard_image(self, storage_id: str, reason: str) -> None:
        """Best-effort media store delete; failures are logged only."""
        try:
            await run_in_threadpool(storage_service.delete, storage_id)
        except DependencyError as exc:
            logger.warning("Could not delete photo %s after %s: %s", storage_id, reason, exc.detail)

    # --- Citizen ---

    async def create_issue(
        self,
        db: AsyncSession,
        actor: Actor,
        title: Any,
        description: Any,
        category: Any,
        location: Any,
        address: str | None = None,
        image: StoredImage | None = None,
    ) -> Issue:
        """Validate and persist a new report.

        The photo (if any) has already been stored by the caller. When
        validation or persistence fails afterwards the stored photo is
        deleted again before the error propagates. Commits on success.

        Args:
            db: Async database session
            actor: Reporting user; snapshotted into the issue
            title, description, category: Raw report fields
            location: Mapping or JSON string with latitude/longitude/address
            address: Address given outside the location object (multipart forms)
            image: Reference to the already stored photo

        Returns:
            Issue: The created issue, status Pending with one history entry

        Raises:
            ValidationError: Missing or malformed fields
            DependencyError: The issue could not be persisted
        """
        try:
            authorize(actor, Action.CREATE)
            data: IssueCreate = self._validate_create(title, description, category, location, address)

            now: datetime = _utcnow()
            try:
                issue = await issue_repository.create(
                    db,
                    {
                        "title": data.title,
                        "description": data.description,
                        "category": data.category,
                        "latitude": data.location.latitude,
                        "longitude": data.location.longitude,
                        "address": data.location.address,
                        "image_url": image.url if image else None,
                        "image_storage_id": image.storage_id if image else None,
                        "status": IssueStatus.PENDING.value,
                        "reporter_id": actor.user_id,
                        "reporter_name": actor.name,
                        "reporter_email": actor.email,
                        "admin_notes": "",
                        "created_at": now,
                        "updated_at": now,
                        "status_history": [
                            IssueStatusHistory(
                                seq=0,
                                status=IssueStatus.PENDING.value,
                                updated_at=now,
                                updated_by=None,
                            )
                        ],
                    },
                )
                await db.commit()
            except SQLAlchemyError as exc:
                await db.rollback()
                logger.error("Persisting issue for user %s failed: %s", actor.user_id, exc)
                raise DependencyError("Error creating issue")
        except Exception:
            if image is not None:
                await self._discard_image(image.storage_id, "failed issue creation")
            raise

        logger.info("Issue %s reported by %s", issue.id, actor.user_id)
        return issue

    async def list_mine(self, db: AsyncSession, actor: Actor) -> Sequence[Issue]:
        return await issue_repository.get_by_reporter(db, actor.user_id)

    async def get_issue(
        self,
        db: AsyncSession,
        actor: Actor | None,
        issue_id: UUID,
        mode: ReadMode,
    ) -> Issue:
        """Read one issue.

        Public mode never fails on authorization; callers must serialize its
        result with ``include_admin_notes=False``.

        Raises:
            AuthorizationError: Owner mode by a non-reporter citizen, admin mode by a citizen
            NotFoundError: No such issue
        """
        if mode is ReadMode.ADMIN:
            authorize(actor, Action.READ_ANY)

        issue = await self._get_or_404(db, issue_id)

        if mode is ReadMode.OWNER:
            authorize(actor, Action.READ, issue)
        return issue

    async def delete_issue(self, db: AsyncSession, actor: Actor, issue_id: UUID) -> None:
        """Delete an issue as its reporter or as an admin.

        The attached photo is deleted first; a media store failure is logged
        and the record is removed anyway.

        Raises:
            NotFoundError: No such issue
            AuthorizationError: Caller is neither the reporter nor an admin
        """
        issue = await self._get_or_404(db, issue_id, for_update=True)
        authorize(actor, Action.DELETE, issue)

        if issue.image_storage_id:
            await self._discard_image(issue.image_storage_id, f"deleting issue {issue.id}")

        await issue_repository.delete(db, issue)
        logger.info("Issue %s deleted by %s", issue_id, actor.user_id)

    # --- Admin ---

    async def list_filtered(
        self,
        db: AsyncSession,
        actor: Actor,
        filters: IssueFilters,
    ) -> Sequence[Issue]:
        authorize(actor, Action.LIST_ALL)
        return await issue_repository.get_filtered(db, filters)

    async def transition_status(
        self,
        db: AsyncSession,
        actor: Actor,
        issue_id: UUID,
        new_status: str | None,
    ) -> Issue:
        """Set a new status and append it to the history.

        There is no forbidden-transition table: any status may follow any
        other, including itself.

        Raises:
            AuthorizationError: Caller is not an admin
            ValidationError: Unknown status value
            NotFoundError: No such issue
        """
        authorize(actor, Action.UPDATE_STATUS)
        if new_status not in ISSUE_STATUSES:
            raise ValidationError("Invalid status value")

        issue = await self._get_or_404(db, issue_id, for_update=True)

        now: datetime = _utcnow()
        issue.status = new_status
        issue.status_history.append(
            IssueStatusHistory(
                seq=len(issue.status_history),
                status=new_status,
                updated_at=now,
                updated_by=actor.user_id,
            )
        )
        issue.updated_at = now
        await db.flush()
        return issue

    async def set_admin_notes(
        self,
        db: AsyncSession,
        actor: Actor,
        issue_id: UUID,
        notes: str | None,
    ) -> Issue:
        """Overwrite the admin notes.

        Raises:
            AuthorizationError: Caller is not an admin
            ValidationError: Notes empty or missing
            NotFoundError: No such issue
        """
        authorize(actor, Action.SET_NOTES)
        if not isinstance(notes, str) or not notes.strip():
            raise ValidationError("Notes are required")

        issue = await self._get_or_404(db, issue_id, for_update=True)
        issue.admin_notes = notes
        issue.updated_at = _utcnow()
        await db.flush()
        return issue


issue_service: IssueService = IssueService()
