"""Issue-related SQLAlchemy ORM model definitions.

Citizen-reported civic problems and their append-only status history.

Tables:
    - issues: Reported issues (with reporter snapshot and optional photo reference)
    - issue_status_history: One row per status the issue has been set to
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import String, DateTime, Float, Integer, Text, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from civic_reporter.database import Base


class IssueStatus(str, Enum):
    """Workflow status. Any status may be set from any other."""

    PENDING = "Pending"
    IN_PROGRESS = "In-Progress"
    RESOLVED = "Resolved"


class IssueCategory(str, Enum):
    ROADS = "Roads"
    WATER_SUPPLY = "Water Supply"
    ELECTRICITY = "Electricity"
    SANITATION = "Sanitation"
    STREET_LIGHTS = "Street Lights"
    DRAINAGE = "Drainage"
    PARKS = "Parks"
    OTHER = "Other"


ISSUE_STATUSES: tuple[str, ...] = tuple(s.value for s in IssueStatus)
ISSUE_CATEGORIES: tuple[str, ...] = tuple(c.value for c in IssueCategory)

DEFAULT_ADDRESS: str = "Unknown Location"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Issue(Base):
    """Issue model — A single citizen-reported civic problem.

    The reporter fields are a snapshot taken at creation time and are never
    re-derived from the users table. ``status`` always equals the status of
    the last ``status_history`` entry.

    Attributes:
        id: Unique identifier
        title: Short summary (max 100 chars)
        description: Details (max 1000 chars)
        category: One of IssueCategory
        latitude / longitude: GPS position
        address: Free-text address ("Unknown Location" when not given)
        image_url / image_storage_id: Media store reference (both NULL without photo)
        status: One of IssueStatus
        reporter_id / reporter_name / reporter_email: Reporter snapshot
        admin_notes: Admin annotation, overwritten in place
        created_at: Creation timestamp (immutable)
        updated_at: Refreshed on every mutation

    Relationships:
        status_history: Ordered history entries (cascade delete)
    """

    __tablename__ = "issues"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(30), nullable=False, index=True)

    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False, default=DEFAULT_ADDRESS)

    # Media store reference: NULL when no photo was attached
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    image_storage_id: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Current status: mirrors the last status_history row
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=IssueStatus.PENDING.value, index=True)

    # Reporter snapshot as of report time
    reporter_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    reporter_name: Mapped[str] = mapped_column(String(255), nullable=False)
    reporter_email: Mapped[str] = mapped_column(String(255), nullable=False)

    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    status_history = relationship(
        "IssueStatusHistory",
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="IssueStatusHistory.seq",
        lazy="selectin",
    )


class IssueStatusHistory(Base):
    """Status history entry — appended on creation and on every status change.

    Attributes:
        id: Unique identifier
        issue_id: Parent issue
        seq: Position in the history (0 = initial entry)
        status: Status that was set
        updated_at: When it was set
        updated_by: Admin who set it (NULL for the system-generated initial entry)
    """

    __tablename__ = "issue_status_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Parent issue (CASCADE: history goes with the issue)
    issue_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
    seq: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    issue = relationship("Issue", back_populates="status_history")
