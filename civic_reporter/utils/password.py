"""Password hashing and verification utility module.

Uses bcrypt directly; the identity store only ever holds the hash.
bcrypt rejects inputs longer than 72 bytes, so callers check
``fits_bcrypt`` before hashing or verifying.
"""

import bcrypt

# bcrypt input limit, in UTF-8 bytes (not characters)
BCRYPT_MAX_BYTES: int = 72


def fits_bcrypt(password: str) -> bool:
    """True if the UTF-8 encoding of ``password`` is within the bcrypt limit."""
    return len(password.encode("utf-8")) <= BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    """Hash a plain text password using bcrypt with a random salt.

    Args:
        password: Plain text password to hash, at most 72 UTF-8 bytes

    Returns:
        str: Bcrypt hash string (~60 chars)
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain text password against a stored bcrypt hash."""
    return bcrypt.checkpw(
        plain_password.encode("utf-8"), hashed_password.encode("utf-8")
    )
