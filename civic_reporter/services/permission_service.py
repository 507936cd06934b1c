"""Permission Service — declarative authorization rules for issues.

Every lifecycle operation asks this module before it mutates anything.
The whole policy is the ``RULES`` table below: for each action, whether the
issue's reporter may perform it and whether an admin may. Actions that are
not tied to one issue (create, list, stats) are evaluated without a resource.

Matrix:
    action               reporter   other citizen   admin
    issue:create         yes        yes             yes
    issue:read           yes        no              yes
    issue:read_any       no         no              yes
    issue:update_status  no         no              yes
    issue:set_notes      no         no              yes
    issue:delete         yes        no              yes
    issue:list_all       no         no              yes
    issue:stats          no         no              yes
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from civic_reporter.models.issue import Issue
from civic_reporter.models.user import User, UserRole
from civic_reporter.utils.exceptions import AuthorizationError


class Action(str, Enum):
    """Permission codes for issue operations."""

    CREATE = "issue:create"
    READ = "issue:read"
    READ_ANY = "issue:read_any"
    UPDATE_STATUS = "issue:update_status"
    SET_NOTES = "issue:set_notes"
    DELETE = "issue:delete"
    LIST_ALL = "issue:list_all"
    STATS = "issue:stats"


@dataclass(frozen=True)
class Actor:
    """Authenticated caller resolved by the access gateway.

    Attributes:
        user_id: Caller's user id
        role: "citizen" or "admin"
        name: Display name (copied into reporter snapshots)
        email: Email (copied into reporter snapshots)
    """

    user_id: UUID
    role: str
    name: str
    email: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(user_id=user.id, role=user.role, name=user.name, email=user.email)


@dataclass(frozen=True)
class Rule:
    """Who may perform an action.

    Attributes:
        anyone: Any authenticated caller
        owner: The issue's reporter
        admin: Any admin
    """

    anyone: bool = False
    owner: bool = False
    admin: bool = False


RULES: dict[Action, Rule] = {
    Action.CREATE: Rule(anyone=True),
    Action.READ: Rule(owner=True, admin=True),
    Action.READ_ANY: Rule(admin=True),
    Action.UPDATE_STATUS: Rule(admin=True),
    Action.SET_NOTES: Rule(admin=True),
    Action.DELETE: Rule(owner=True, admin=True),
    Action.LIST_ALL: Rule(admin=True),
    Action.STATS: Rule(admin=True),
}

_DENIED_MESSAGES: dict[Action, str] = {
    Action.READ: "Not authorized to access this issue",
    Action.DELETE: "Not authorized to delete this issue",
}


def is_owner(actor: Actor, issue: Issue) -> bool:
    return issue.reporter_id == actor.user_id


def is_allowed(actor: Actor, action: Action, issue: Issue | None = None) -> bool:
    """Evaluate the rules table for one caller, action and (optional) issue."""
    rule: Rule = RULES[action]
    if rule.anyone:
        return True
    if rule.admin and actor.is_admin:
        return True
    if rule.owner and issue is not None and is_owner(actor, issue):
        return True
    return False


def authorize(actor: Actor, action: Action, issue: Issue | None = None) -> None:
    """Raise AuthorizationError unless the rules table allows the action.

    Raises:
        AuthorizationError: The caller lacks the role or ownership required
    """
    if not is_allowed(actor, action, issue):
        raise AuthorizationError(_DENIED_MESSAGES.get(action, "Admin access required"))
