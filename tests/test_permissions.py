"""Authorization tests — the rules table, and its enforcement inside the issue service."""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.models import Issue
from civic_reporter.repositories.issue_repository import issue_repository
from civic_reporter.services.issue_service import issue_service
from civic_reporter.services.permission_service import Action, Actor, authorize, is_allowed
from civic_reporter.utils.exceptions import AuthorizationError

REPORTER = Actor(user_id=uuid.uuid4(), role="citizen", name="Reporter", email="reporter@citymail.com")
STRANGER = Actor(user_id=uuid.uuid4(), role="citizen", name="Stranger", email="stranger@citymail.com")
ADMIN = Actor(user_id=uuid.uuid4(), role="admin", name="Admin", email="admin@citymail.com")


@pytest.fixture
def issue() -> Issue:
    return Issue(reporter_id=REPORTER.user_id, reporter_name=REPORTER.name, reporter_email=REPORTER.email)


ADMIN_ONLY = [Action.READ_ANY, Action.UPDATE_STATUS, Action.SET_NOTES, Action.LIST_ALL, Action.STATS]


class TestRulesTable:

    @pytest.mark.parametrize("actor", [REPORTER, STRANGER, ADMIN])
    def test_anyone_can_create(self, actor):
        assert is_allowed(actor, Action.CREATE)

    @pytest.mark.parametrize("action", [Action.READ, Action.DELETE])
    def test_reporter_and_admin_on_own_issue(self, issue, action):
        assert is_allowed(REPORTER, action, issue)
        assert is_allowed(ADMIN, action, issue)
        assert not is_allowed(STRANGER, action, issue)

    @pytest.mark.parametrize("action", ADMIN_ONLY)
    def test_admin_only_actions(self, issue, action):
        assert is_allowed(ADMIN, action, issue)
        assert not is_allowed(REPORTER, action, issue)
        assert not is_allowed(STRANGER, action, issue)

    def test_ownership_needs_an_issue(self):
        assert not is_allowed(REPORTER, Action.READ)


class TestAuthorize:

    def test_denied_read_message(self, issue):
        with pytest.raises(AuthorizationError) as exc_info:
            authorize(STRANGER, Action.READ, issue)
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "Not authorized to access this issue"

    def test_denied_delete_message(self, issue):
        with pytest.raises(AuthorizationError) as exc_info:
            authorize(STRANGER, Action.DELETE, issue)
        assert exc_info.value.detail == "Not authorized to delete this issue"

    def test_denied_admin_action_message(self, issue):
        with pytest.raises(AuthorizationError) as exc_info:
            authorize(REPORTER, Action.UPDATE_STATUS, issue)
        assert exc_info.value.detail == "Admin access required"

    def test_allowed_returns_none(self, issue):
        assert authorize(ADMIN, Action.STATS) is None


class TestServiceEnforcement:
    """The engine checks permissions itself, whatever the router did."""

    async def test_citizen_cannot_transition_own_issue(self, db: AsyncSession, make_issue, citizen_user):
        issue = await make_issue(citizen_user)
        with pytest.raises(AuthorizationError) as exc_info:
            await issue_service.transition_status(db, Actor.from_user(citizen_user), issue.id, "Resolved")
        assert exc_info.value.detail == "Admin access required"

        stored = await issue_repository.get_with_history(db, issue.id)
        assert stored.status == "Pending"
        assert [entry.status for entry in stored.status_history] == ["Pending"]

    async def test_citizen_cannot_set_notes(self, db: AsyncSession, make_issue, citizen_user):
        issue = await make_issue(citizen_user)
        with pytest.raises(AuthorizationError):
            await issue_service.set_admin_notes(db, Actor.from_user(citizen_user), issue.id, "Closing this myself")

        stored = await issue_repository.get_with_history(db, issue.id)
        assert stored.admin_notes == ""
