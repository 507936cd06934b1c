"""SQLAlchemy ORM models package — Central import point for all domain models.

Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for ``create_all`` and
relationship resolution.

Modules:
    user: User accounts and roles
    issue: Issues and their status history
"""

from civic_reporter.models.user import User, UserRole
from civic_reporter.models.issue import Issue, IssueStatusHistory, IssueStatus, IssueCategory

__all__ = [
    "User", "UserRole",
    "Issue", "IssueStatusHistory", "IssueStatus", "IssueCategory",
]
