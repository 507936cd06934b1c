"""FastAPI dependency injection module — the access gateway.

Authentication Flow:
    1. Client sends Authorization: Bearer <token> header
    2. HTTPBearer extracts the token
    3. decode_token() verifies the JWT and returns the payload
    4. The user is fetched from the identity store using the payload "sub" field
    5. The user is reduced to an Actor(user_id, role, name, email) for the lifecycle engine

The role is always read from the database, never trusted from the token.
"""

from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from civic_reporter.database import get_db
from civic_reporter.models.user import User
from civic_reporter.repositories.user_repository import user_repository
from civic_reporter.services.permission_service import Action, Actor, authorize
from civic_reporter.utils.exceptions import AuthenticationError
from civic_reporter.utils.jwt import decode_token

# Extracts JWT token from Authorization: Bearer <token> header.
# auto_error=False so a missing header is a 401 from this module, not a 403.
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Decode JWT from the Authorization header and return the authenticated user.

    Args:
        credentials: Bearer token credentials from header
        db: Async database session

    Returns:
        User: Authenticated user ORM instance

    Raises:
        AuthenticationError: Missing, invalid or expired token, or the user no longer exists
    """
    if credentials is None:
        raise AuthenticationError("Not authorized, no token")

    try:
        payload: dict = decode_token(credentials.credentials)
        if payload.get("type") != "access":
            raise AuthenticationError("Invalid token type")
        user_id = UUID(payload["sub"])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except (jwt.InvalidTokenError, KeyError, ValueError, TypeError):
        raise AuthenticationError("Not authorized, token failed")

    user: User | None = await user_repository.get_by_id(db, user_id)
    if user is None:
        raise AuthenticationError("User not found")
    return user


async def get_actor(
    current_user: Annotated[User, Depends(get_current_user)],
) -> Actor:
    """Authenticated caller as seen by the lifecycle engine."""
    return Actor.from_user(current_user)


async def require_admin(
    actor: Annotated[Actor, Depends(get_actor)],
) -> Actor:
    """Reject non-admin callers before the /admin handlers run.

    Raises:
        AuthorizationError: Caller is not an admin
    """
    authorize(actor, Action.LIST_ALL)
    return actor
