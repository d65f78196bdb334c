"""
Error taxonomy for dnsconsole.

Every error that reaches the HTTP boundary is a ConsoleError and renders to
the same envelope:

    {"success": false, "error": "<short message>", "message": "<detail>"}

Both fields are always plain strings so the UI can display them directly.
"""

from typing import Any, Dict, Optional


class ConsoleError(Exception):
    """Base exception carrying an HTTP status and an envelope-ready message pair."""

    status_code: int = 500
    default_error: str = "Internal server error"

    def __init__(
        self,
        error: Optional[str] = None,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.error = error or self.default_error
        self.message = message or self.error
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.error)

    def to_envelope(self) -> Dict[str, Any]:
        """Render the normalized error envelope."""
        return {"success": False, "error": self.error, "message": self.message}

    def __str__(self) -> str:
        return f"{type(self).__name__} ({self.status_code}): {self.error}"


class ValidationError(ConsoleError):
    """Missing required input fields or malformed request content."""

    status_code = 400
    default_error = "Validation error"


class AuthFailure(ConsoleError):
    """Operator login rejected. Never says which half of the credentials was wrong."""

    status_code = 401
    default_error = "Invalid username or password"


class TokenInvalid(ConsoleError):
    """Session token missing (401) or invalid/expired (403)."""

    status_code = 403
    default_error = "Invalid or expired token"


class AccountNotFound(ConsoleError):
    """No stored credential with the requested id."""

    status_code = 404
    default_error = "Account not found"


class DuplicateAccount(ConsoleError):
    """A credential with the requested id is already stored."""

    status_code = 409
    default_error = "Account already exists"


class NoAccountsConfigured(ConsoleError):
    """A default-account route was called with an empty credential store."""

    status_code = 400
    default_error = "No Cloudflare accounts configured. Please add an account first."


class StorageFailure(ConsoleError):
    """Durable read/write of the credential store failed."""

    status_code = 500
    default_error = "Failed to persist account data"


class UpstreamRejected(ConsoleError):
    """Cloudflare answered with a 4xx."""

    status_code = 400
    default_error = "Cloudflare API error"


class TokenRejected(UpstreamRejected):
    """A candidate Cloudflare API token failed verification."""

    INVALID = "invalid"
    WRONG_TYPE = "wrong_type"
    INSUFFICIENT_PERMISSION = "insufficient_permission"
    INACTIVE = "inactive"

    default_error = "API token verification failed"

    def __init__(self, reason: str, error: Optional[str] = None, message: Optional[str] = None):
        super().__init__(error, message, status_code=400)
        self.reason = reason


class UpstreamError(ConsoleError):
    """Cloudflare answered with a 5xx or could not be reached."""

    status_code = 502
    default_error = "Cloudflare API unavailable"


class UpstreamTimeout(UpstreamError):
    """A Cloudflare call exceeded the configured timeout."""

    status_code = 504
    default_error = "Request to Cloudflare API timed out"


__all__ = [
    "ConsoleError",
    "ValidationError",
    "AuthFailure",
    "TokenInvalid",
    "AccountNotFound",
    "DuplicateAccount",
    "NoAccountsConfigured",
    "StorageFailure",
    "UpstreamRejected",
    "TokenRejected",
    "UpstreamError",
    "UpstreamTimeout",
]
