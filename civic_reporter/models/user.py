"""User SQLAlchemy ORM model definition.

The identity store: account credentials, contact details and role.
Two roles exist, ``citizen`` (default for self-registration) and ``admin``.

Tables:
    - users: User accounts
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import String, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from civic_reporter.database import Base


class UserRole(str, Enum):
    """Account roles."""

    CITIZEN = "citizen"
    ADMIN = "admin"


class User(Base):
    """User model — System user account information.

    Email is globally unique and stored lower-cased.

    Attributes:
        id: Unique identifier
        name: Full display name
        email: Login email address (unique)
        phone: Contact phone number (optional)
        password_hash: bcrypt-hashed password
        role: "citizen" or "admin"
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "users"

    # User unique identifier (UUID v4, auto-generated)
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # Full display name: copied into issue reporter snapshots
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Login email (unique, lower-cased)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    # bcrypt hashed password (never store plaintext)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    # Role: "citizen" | "admin"
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.CITIZEN.value)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))
