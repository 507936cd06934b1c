"""Custom HTTP exception classes module.

Provides pre-configured HTTPException subclasses for the error taxonomy
of the issue lifecycle. Services raise these directly; the handlers in
``civic_reporter.main`` render them into the JSON response envelope.

Usage:
    from civic_reporter.utils.exceptions import NotFoundError, AuthorizationError
    raise NotFoundError("Issue not found")
    raise AuthorizationError("Not authorized to access this issue")
"""

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """400 Bad Request exception.

    Raised for missing or malformed input: required fields, unknown status
    values, unparseable locations or dates, rejected photo uploads.

    Args:
        detail: Error message (default: "Invalid request data")
    """

    def __init__(self, detail: str = "Invalid request data") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthenticationError(HTTPException):
    """401 Unauthorized exception.

    Raised when identity is missing, invalid, or expired
    (missing bearer token, bad signature, wrong credentials).

    Args:
        detail: Error message (default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(HTTPException):
    """403 Forbidden exception.

    Raised when a valid identity lacks the role or ownership an action needs.

    Args:
        detail: Error message (default: "Insufficient permissions")
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class NotFoundError(HTTPException):
    """404 Not Found exception.

    Raised when a referenced issue (or user) does not exist.

    Args:
        detail: Error message (default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DependencyError(HTTPException):
    """500 Internal Server Error for collaborator failures.

    Raised when the media store or the database fails. Callers that treat
    the collaborator as best-effort catch it and log instead.

    Args:
        detail: Error message (default: "Upstream service failure")
    """

    def __init__(self, detail: str = "Upstream service failure") -> None:
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
