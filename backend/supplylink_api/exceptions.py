"""
Exception hierarchy for the SupplyLink backend.

Services raise these; the handlers registered in ``main`` turn them into
structured JSON responses. Each class carries the HTTP status it maps to.
"""

from typing import Any, Optional


class SupplyLinkError(Exception):
    """
    Base exception for all SupplyLink errors.

    All custom exceptions should inherit from this class.
    """

    status_code: int = 500
    default_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(SupplyLinkError):
    """Input validation failed."""

    status_code = 400
    default_code = "VALIDATION_ERROR"


class ConflictError(SupplyLinkError):
    """A unique key is already taken."""

    status_code = 400
    default_code = "CONFLICT"


class NotFoundError(SupplyLinkError):
    """
    No matching record.

    Also raised when a record exists but belongs to another owner, so callers
    cannot probe for other owners' records.
    """

    status_code = 404
    default_code = "NOT_FOUND"


class AuthenticationError(SupplyLinkError):
    """Authentication failed (invalid or missing credentials)."""

    status_code = 401
    default_code = "AUTHENTICATION_FAILED"


class MissingTokenError(AuthenticationError):
    """Raised when no bearer token is provided."""

    def __init__(self, message: str = "Access token required"):
        super().__init__(message, code="MISSING_TOKEN")


class InvalidTokenError(AuthenticationError):
    """Raised when a token is malformed, tampered with or expired."""

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message, code="INVALID_TOKEN")


class InvalidCredentialsError(AuthenticationError):
    """Unknown email and wrong password are reported identically."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code="INVALID_CREDENTIALS")


class AuthorizationError(SupplyLinkError):
    """Authorization failed (insufficient permissions)."""

    status_code = 403
    default_code = "FORBIDDEN"


class InsufficientRoleError(AuthorizationError):
    """Raised when the caller's role is outside the allow-set."""

    def __init__(self, role: str, allowed: list[str]):
        super().__init__(
            "Access denied. Insufficient permissions.",
            code="INSUFFICIENT_ROLE",
            details={"role": role, "allowed_roles": allowed},
        )


class InternalError(SupplyLinkError):
    """Store or dependency failure."""

    status_code = 500
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Something went wrong"):
        super().__init__(message)
