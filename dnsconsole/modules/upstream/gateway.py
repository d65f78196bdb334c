"""
Upstream gateway: resolves stored credentials into authenticated Cloudflare
clients and vets new API tokens before they are stored.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ...config.provider import UpstreamConfig
from ...exceptions import (
    AccountNotFound,
    NoAccountsConfigured,
    TokenRejected,
    UpstreamError,
    UpstreamRejected,
    UpstreamTimeout,
)
from .client import CloudflareClient

logger = logging.getLogger(__name__)

# Cloudflare error codes seen on /user/tokens/verify and zone reads
INVALID_TOKEN_CODES = {1000, 1001}
WRONG_TOKEN_TYPE_CODES = {6003, 6103, 6111, 9106}
INSUFFICIENT_PERMISSION_CODES = {9109, 10000}

REJECTION_MESSAGES = {
    TokenRejected.INVALID: (
        "Invalid API token",
        "The API token is invalid or has been revoked. Check that it was copied correctly.",
    ),
    TokenRejected.WRONG_TYPE: (
        "Wrong API token type",
        "The API token format is not accepted. Use a custom API Token, not the Global API Key.",
    ),
    TokenRejected.INSUFFICIENT_PERMISSION: (
        "Insufficient API token permissions",
        "The API token lacks required permissions. It needs Zone:Read and DNS:Edit.",
    ),
    TokenRejected.INACTIVE: (
        "API token is not active",
        "The API token is disabled or expired.",
    ),
}


def classify_rejection(exc: UpstreamRejected) -> str:
    """Decide why Cloudflare rejected a token, preferring error codes over status."""
    codes = set(getattr(exc, "upstream_codes", []) or [])
    if codes & WRONG_TOKEN_TYPE_CODES:
        return TokenRejected.WRONG_TYPE
    if codes & INSUFFICIENT_PERMISSION_CODES:
        return TokenRejected.INSUFFICIENT_PERMISSION
    if codes & INVALID_TOKEN_CODES:
        return TokenRejected.INVALID

    if exc.status_code == 400:
        return TokenRejected.WRONG_TYPE
    if exc.status_code == 403:
        return TokenRejected.INSUFFICIENT_PERMISSION
    return TokenRejected.INVALID


def token_rejected(reason: str, detail: Optional[str] = None) -> TokenRejected:
    error, message = REJECTION_MESSAGES[reason]
    if detail:
        message = f"{message} (Cloudflare: {detail})"
    return TokenRejected(reason, error, message)


class UpstreamGateway:
    """
    Builds Cloudflare clients for stored accounts.

    The gateway is the only consumer of CredentialStore.get(); stored tokens
    leave the process only as bearer headers on calls to the fixed base URL.
    """

    def __init__(
        self,
        store,
        config: Optional[UpstreamConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the gateway.

        Args:
            store: CredentialStore holding account tokens
            config: Cloudflare API configuration
            transport: Optional httpx transport (tests)
        """
        self.store = store
        self.config = config or UpstreamConfig()
        self._transport = transport

    def _client(self, api_token: str, account_id: Optional[str] = None) -> CloudflareClient:
        return CloudflareClient(
            api_token,
            base_url=self.config.base_url,
            timeout=self.config.timeout,
            transport=self._transport,
            account_id=account_id,
        )

    def for_account(self, account_id: str) -> CloudflareClient:
        """
        Get a client bound to a stored account's token.

        Raises:
            AccountNotFound: If no credential is stored under account_id
        """
        record = self.store.get(account_id)
        if record is None:
            raise AccountNotFound()
        return self._client(record.token, account_id=record.id)

    def default_account_id(self) -> str:
        """
        First stored account, used by the single-account routes.

        Raises:
            NoAccountsConfigured: If the store is empty
        """
        accounts = self.store.list()
        if not accounts:
            raise NoAccountsConfigured()
        return accounts[0]["id"]

    async def verify_new_token(self, raw_token: str) -> Dict[str, Any]:
        """
        Check that a candidate API token is usable before it is stored.

        Calls /user/tokens/verify, then (unless disabled) checks zone read
        access so a token without Zone:Read is caught up front.

        Args:
            raw_token: Candidate Cloudflare API token

        Returns:
            Cloudflare's token verification result

        Raises:
            TokenRejected: Token invalid, wrong type, inactive or under-scoped
            UpstreamTimeout: Cloudflare did not answer in time
            UpstreamError: Cloudflare failed or could not be reached (status 500)
        """
        client = self._client(raw_token)

        try:
            result = await client.verify_token() or {}
        except UpstreamTimeout:
            raise
        except UpstreamRejected as e:
            reason = classify_rejection(e)
            logger.info(f"Candidate API token rejected by Cloudflare ({reason})")
            raise token_rejected(reason, e.error)
        except UpstreamError as e:
            raise UpstreamError(
                "Failed to verify API token",
                f"Error while verifying API token: {e.message}",
                status_code=500,
            )

        status = result.get("status") if isinstance(result, dict) else None
        if status and status != "active":
            logger.info(f"Candidate API token is {status}")
            raise token_rejected(TokenRejected.INACTIVE, f"token status is '{status}'")

        if self.config.verify_permissions:
            try:
                await client.list_zones({"per_page": 5})
            except UpstreamTimeout:
                raise
            except UpstreamRejected as e:
                reason = classify_rejection(e)
                if e.status_code in (401, 403):
                    reason = TokenRejected.INSUFFICIENT_PERMISSION
                logger.info(f"Candidate API token cannot read zones ({reason})")
                raise token_rejected(reason, e.error)
            except UpstreamError as e:
                raise UpstreamError(
                    "Failed to verify API token",
                    f"Error while verifying API token: {e.message}",
                    status_code=500,
                )

        return result if isinstance(result, dict) else {}
