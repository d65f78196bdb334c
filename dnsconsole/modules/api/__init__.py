"""
API Module - Black Box Interface

Purpose: HTTP routing and module orchestration
Interface: REST API routers
Hidden: Request parsing, response shaping

The API module only orchestrates - it contains no business logic.
All logic is delegated to the auth, credentials and upstream modules.
"""

from .models import (
    AccountSummary,
    CreateAccountRequest,
    DNSRecordPayload,
    ErrorResponse,
    LoginRequest,
)
from .routes import (
    create_accounts_router,
    create_auth_router,
    create_dns_router,
    create_health_router,
    current_operator,
)

__all__ = [
    "AccountSummary",
    "CreateAccountRequest",
    "DNSRecordPayload",
    "ErrorResponse",
    "LoginRequest",
    "create_accounts_router",
    "create_auth_router",
    "create_dns_router",
    "create_health_router",
    "current_operator",
]
