"""
REST routes for dnsconsole.

Routers only orchestrate: credentials live in the credential store, tokens in
the authenticator and Cloudflare access in the upstream gateway. Errors are
raised as ConsoleError subclasses and rendered by the app's exception handlers.
"""

import logging
import re
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from ...exceptions import AccountNotFound, DuplicateAccount, TokenInvalid, ValidationError
from ...logging_config import audit_event
from ..auth import Identity
from ..credentials import validate_account_id
from .models import (
    AccountListResponse,
    AccountResponse,
    CreateAccountRequest,
    DNSRecordPayload,
    ErrorResponse,
    HealthResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    UpstreamResponse,
    VerifyResponse,
)

logger = logging.getLogger(__name__)

# Cloudflare zone and record ids are 32 hex chars; allow a little slack
UPSTREAM_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def current_operator(request: Request) -> Identity:
    """Identity attached by the access control middleware."""
    identity = getattr(request.state, "operator", None)
    if identity is None:
        raise TokenInvalid("Access token required", status_code=401)
    return identity


def _check_upstream_id(value: str, label: str) -> str:
    if not UPSTREAM_ID_PATTERN.match(value):
        raise ValidationError(f"Invalid {label}", f"{label} contains unsupported characters")
    return value


def _error_responses(*status_codes: int) -> dict:
    """OpenAPI `responses` entries for the shared error envelope."""
    return {code: {"model": ErrorResponse} for code in status_codes}


def create_auth_router(authenticator) -> APIRouter:
    """
    Create the login/verify router.

    Args:
        authenticator: SessionAuthenticator instance

    Returns:
        FastAPI router with /auth endpoints
    """
    router = APIRouter(prefix="/auth", tags=["auth"], responses=_error_responses(400, 401, 403))

    @router.post("/login", response_model=LoginResponse)
    async def login(body: LoginRequest):
        """
        Exchange operator credentials for a session token.

        Returns:
            200: Token and user info
            400: Username or password missing
            401: Invalid username or password
        """
        if not body.username or not body.password:
            raise ValidationError("Username and password are required")

        session = await run_in_threadpool(authenticator.authenticate, body.username, body.password)
        return LoginResponse(token=session.token, user=session.identity.to_user())

    @router.get("/verify", response_model=VerifyResponse)
    async def verify(operator: Identity = Depends(current_operator)):
        """Confirm the presented session token is still valid."""
        return VerifyResponse(valid=True, user=operator.to_user())

    return router


def create_accounts_router(store, gateway) -> APIRouter:
    """
    Create the account credential management router.

    Args:
        store: CredentialStore instance
        gateway: UpstreamGateway used to vet new tokens

    Returns:
        FastAPI router with /accounts endpoints
    """
    router = APIRouter(
        prefix="/accounts", tags=["accounts"], responses=_error_responses(400, 401, 403, 404, 409, 500, 502, 504)
    )

    @router.get("", response_model=AccountListResponse)
    async def list_accounts(operator: Identity = Depends(current_operator)):
        """List stored accounts. Tokens are never included."""
        return {"success": True, "data": store.list()}

    @router.post("", response_model=AccountResponse)
    async def add_account(body: CreateAccountRequest, operator: Identity = Depends(current_operator)):
        """
        Verify a Cloudflare API token upstream, then store it.

        Returns:
            200: Account stored
            400: Missing fields, invalid id, or token rejected by Cloudflare
            409: Account id already exists
            500: Token verification or storage failed
        """
        missing = body.missing_fields()
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                "id, name and token are all required",
            )

        account_id = validate_account_id(body.id.strip())
        if store.exists(account_id) and not store.allow_overwrite:
            raise DuplicateAccount(message=f"Account '{account_id}' already exists")

        await gateway.verify_new_token(body.token.strip())

        record = await run_in_threadpool(store.add, account_id, body.name.strip(), body.token.strip())
        audit_event("account_added", {"account_id": record.id, "name": record.name}, operator.username)
        return {"success": True, "data": record.to_public()}

    @router.delete("/{account_id}", response_model=MessageResponse)
    async def delete_account(account_id: str, operator: Identity = Depends(current_operator)):
        """
        Remove a stored account.

        Returns:
            200: Account deleted
            404: Account not found
        """
        removed = await run_in_threadpool(store.remove, account_id)
        if not removed:
            raise AccountNotFound()

        audit_event("account_removed", {"account_id": account_id}, operator.username)
        return {"success": True, "message": "Account deleted successfully"}

    return router


def create_dns_router(gateway) -> APIRouter:
    """
    Create the Cloudflare pass-through router.

    Account-scoped routes live under /accounts/{account_id}; the bare /zones
    routes act on the first stored account.

    Args:
        gateway: UpstreamGateway instance

    Returns:
        FastAPI router with zone and DNS record endpoints
    """
    router = APIRouter(tags=["dns"], responses=_error_responses(400, 401, 403, 404, 500, 502, 504))

    async def list_zones(account_id: str, request: Request):
        client = gateway.for_account(account_id)
        result = await client.list_zones(list(request.query_params.multi_items()) or None)
        return {"success": True, "data": result}

    async def list_records(account_id: str, zone_id: str, request: Request):
        _check_upstream_id(zone_id, "zone id")
        client = gateway.for_account(account_id)
        params = list(request.query_params.multi_items()) or None
        result = await client.list_dns_records(zone_id, params)
        return {"success": True, "data": result}

    async def create_record(account_id: str, zone_id: str, body: DNSRecordPayload, operator: Identity):
        _check_upstream_id(zone_id, "zone id")
        client = gateway.for_account(account_id)
        result = await client.create_dns_record(zone_id, body.to_upstream())
        audit_event(
            "dns_record_created",
            {"account_id": account_id, "zone_id": zone_id, "type": body.type, "name": body.name,
             "record_id": result.get("id") if isinstance(result, dict) else None},
            operator.username,
        )
        return {"success": True, "data": result}

    async def update_record(account_id: str, zone_id: str, record_id: str, body: DNSRecordPayload,
                            operator: Identity):
        _check_upstream_id(zone_id, "zone id")
        _check_upstream_id(record_id, "record id")
        client = gateway.for_account(account_id)
        result = await client.update_dns_record(zone_id, record_id, body.to_upstream())
        audit_event(
            "dns_record_updated",
            {"account_id": account_id, "zone_id": zone_id, "record_id": record_id,
             "type": body.type, "name": body.name},
            operator.username,
        )
        return {"success": True, "data": result}

    async def delete_record(account_id: str, zone_id: str, record_id: str, operator: Identity):
        _check_upstream_id(zone_id, "zone id")
        _check_upstream_id(record_id, "record id")
        client = gateway.for_account(account_id)
        result = await client.delete_dns_record(zone_id, record_id)
        audit_event(
            "dns_record_deleted",
            {"account_id": account_id, "zone_id": zone_id, "record_id": record_id},
            operator.username,
        )
        return {"success": True, "data": result}

    # Account-scoped routes

    @router.get("/accounts/{account_id}/zones", response_model=UpstreamResponse)
    async def account_zones(account_id: str, request: Request, operator: Identity = Depends(current_operator)):
        """List zones of a stored account. Query parameters are forwarded."""
        return await list_zones(account_id, request)

    @router.get("/accounts/{account_id}/zones/{zone_id}", response_model=UpstreamResponse)
    async def account_zone(account_id: str, zone_id: str, operator: Identity = Depends(current_operator)):
        """Get zone details."""
        _check_upstream_id(zone_id, "zone id")
        client = gateway.for_account(account_id)
        return {"success": True, "data": await client.get_zone(zone_id)}

    @router.get("/accounts/{account_id}/zones/{zone_id}/dns_records", response_model=UpstreamResponse)
    async def account_records(account_id: str, zone_id: str, request: Request,
                              operator: Identity = Depends(current_operator)):
        """List DNS records. Query parameters (type, name, page, per_page, ...) are forwarded."""
        return await list_records(account_id, zone_id, request)

    @router.post("/accounts/{account_id}/zones/{zone_id}/dns_records", response_model=UpstreamResponse)
    async def account_create_record(account_id: str, zone_id: str, body: DNSRecordPayload,
                                    operator: Identity = Depends(current_operator)):
        """Create a DNS record."""
        return await create_record(account_id, zone_id, body, operator)

    @router.put("/accounts/{account_id}/zones/{zone_id}/dns_records/{record_id}", response_model=UpstreamResponse)
    async def account_update_record(account_id: str, zone_id: str, record_id: str, body: DNSRecordPayload,
                                    operator: Identity = Depends(current_operator)):
        """Replace a DNS record."""
        return await update_record(account_id, zone_id, record_id, body, operator)

    @router.delete("/accounts/{account_id}/zones/{zone_id}/dns_records/{record_id}",
                   response_model=UpstreamResponse)
    async def account_delete_record(account_id: str, zone_id: str, record_id: str,
                                    operator: Identity = Depends(current_operator)):
        """Delete a DNS record."""
        return await delete_record(account_id, zone_id, record_id, operator)

    # Default-account routes

    @router.get("/zones", response_model=UpstreamResponse)
    async def default_zones(request: Request, operator: Identity = Depends(current_operator)):
        """List zones of the first stored account."""
        return await list_zones(gateway.default_account_id(), request)

    @router.get("/zones/{zone_id}/dns_records", response_model=UpstreamResponse)
    async def default_records(zone_id: str, request: Request, operator: Identity = Depends(current_operator)):
        """List DNS records using the first stored account."""
        return await list_records(gateway.default_account_id(), zone_id, request)

    @router.post("/zones/{zone_id}/dns_records", response_model=UpstreamResponse)
    async def default_create_record(zone_id: str, body: DNSRecordPayload,
                                    operator: Identity = Depends(current_operator)):
        """Create a DNS record using the first stored account."""
        return await create_record(gateway.default_account_id(), zone_id, body, operator)

    @router.put("/zones/{zone_id}/dns_records/{record_id}", response_model=UpstreamResponse)
    async def default_update_record(zone_id: str, record_id: str, body: DNSRecordPayload,
                                    operator: Identity = Depends(current_operator)):
        """Replace a DNS record using the first stored account."""
        return await update_record(gateway.default_account_id(), zone_id, record_id, body, operator)

    @router.delete("/zones/{zone_id}/dns_records/{record_id}", response_model=UpstreamResponse)
    async def default_delete_record(zone_id: str, record_id: str, operator: Identity = Depends(current_operator)):
        """Delete a DNS record using the first stored account."""
        return await delete_record(gateway.default_account_id(), zone_id, record_id, operator)

    return router


def create_health_router(store) -> APIRouter:
    """Create the unauthenticated liveness router."""
    router = APIRouter(tags=["health"])

    @router.get("/health", response_model=HealthResponse)
    async def health():
        """
        Liveness probe. Reachable without a session token.

        Returns:
            200: Service is running
        """
        return {
            "success": True,
            "message": "Cloudflare DNS Server is running",
            "timestamp": datetime.now(UTC).isoformat(),
            "accounts": len(store),
        }

    return router
