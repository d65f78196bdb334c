"""
Access Control Middleware Module - Black Box Interface

Purpose: Gate every protected request behind a valid session token
Interface: AccessControlMiddleware, create_session_middleware()
Hidden: Header parsing, error formatting, skip rules

Any FastAPI app can use it by supplying a token verifier.
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

MISSING_TOKEN_ERROR = "Access token required"
INVALID_TOKEN_ERROR = "Invalid or expired token"


class AccessControlMiddleware:
    """
    Bearer session token middleware for FastAPI applications.

    - No bearer token: 401 "Access token required"
    - Token the verifier rejects: 403 "Invalid or expired token"
    - Otherwise the verified identity is stored on request.state.operator
    """

    def __init__(
        self,
        token_verifier: Callable[[str], Optional[Any]],
        skip_paths: Optional[Dict[str, list]] = None,
        log_attempts: bool = True
    ):
        """
        Initialize access control middleware.

        Args:
            token_verifier: Function returning an identity for a valid token, None otherwise
            skip_paths: Dict of {path: [methods]} reachable without a token
            log_attempts: Whether to log rejected requests
        """
        self.token_verifier = token_verifier
        self.skip_paths = skip_paths or {}
        self.log_attempts = log_attempts

    def should_skip_auth(self, request: Request) -> bool:
        """Check if authentication should be skipped for this request."""
        method = request.method.upper()
        # CORS preflight never carries credentials
        if method == "OPTIONS":
            return True

        path = str(request.url.path).rstrip("/") or "/"
        if path in self.skip_paths:
            allowed_methods = self.skip_paths[path]
            if "*" in allowed_methods or method in allowed_methods:
                return True

        return False

    @staticmethod
    def extract_bearer_token(request: Request) -> Optional[str]:
        """Extract the bearer token from the Authorization header."""
        auth_header = request.headers.get("authorization")
        if not auth_header:
            return None

        parts = auth_header.strip().split(None, 1)
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return None

        token = parts[1].strip()
        return token or None

    @staticmethod
    def format_error(status_code: int, error: str) -> JSONResponse:
        """Build the normalized error envelope response."""
        return JSONResponse(
            status_code=status_code,
            content={"success": False, "error": error, "message": error},
        )

    async def __call__(self, request: Request, call_next):
        """Process the request through access control."""
        if self.should_skip_auth(request):
            return await call_next(request)

        token = self.extract_bearer_token(request)
        if not token:
            if self.log_attempts:
                logger.warning(f"{request.method} {request.url.path} without access token")
            return self.format_error(401, MISSING_TOKEN_ERROR)

        identity = self.token_verifier(token)
        if identity is None:
            if self.log_attempts:
                logger.warning(f"{request.method} {request.url.path} with invalid or expired token")
            return self.format_error(403, INVALID_TOKEN_ERROR)

        request.state.operator = identity
        return await call_next(request)


def create_session_middleware(
    authenticator,
    prefix: str = "",
    skip_paths: Optional[Dict[str, list]] = None,
) -> AccessControlMiddleware:
    """
    Factory function for the session token middleware.

    Login and the health probe are always reachable without a token.

    Args:
        authenticator: SessionAuthenticator with verify_token()
        prefix: API route prefix, e.g. "/api"
        skip_paths: Extra paths to leave unauthenticated

    Returns:
        Configured AccessControlMiddleware instance
    """
    paths = {
        f"{prefix}/auth/login": ["POST"],
        f"{prefix}/health": ["GET", "HEAD"],
    }
    paths.update(skip_paths or {})

    return AccessControlMiddleware(
        token_verifier=authenticator.verify_token,
        skip_paths=paths,
    )


__all__ = [
    "AccessControlMiddleware",
    "create_session_middleware",
    "MISSING_TOKEN_ERROR",
    "INVALID_TOKEN_ERROR",
]
