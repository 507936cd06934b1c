"""Identity token creation and verification utility module.

Tokens are opaque to the issue lifecycle beyond the user id they carry.

JWT Payload Structure:
    {
        "sub": "user_uuid",     # User identifier
        "role": "citizen",      # Role at issue time (informational; the DB role is authoritative)
        "exp": 1234567890,      # Expiration UNIX timestamp
        "type": "access"        # Token type discriminator
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any
import jwt

from civic_reporter.config import settings


def create_access_token(data: dict[str, Any]) -> str:
    """Generate a signed identity token with the given payload data.

    The token expires after JWT_ACCESS_TOKEN_EXPIRE_DAYS (default: 7 days).

    Args:
        data: JWT payload data, typically {"sub": user_id, "role": role}

    Returns:
        str: Encoded JWT token string

    Example:
        token = create_access_token({"sub": str(user.id), "role": user.role})
    """
    to_encode: dict[str, Any] = data.copy()
    expire: datetime = datetime.now(timezone.utc) + timedelta(days=settings.JWT_ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and verify a JWT token string.

    Args:
        token: Encoded JWT token string

    Returns:
        dict[str, Any]: Decoded payload dictionary

    Raises:
        jwt.ExpiredSignatureError: When token has expired
        jwt.InvalidTokenError: When token is invalid
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
