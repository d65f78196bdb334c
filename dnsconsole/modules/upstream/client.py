"""
Cloudflare API client for dnsconsole.

Thin async wrapper over the Cloudflare v4 API bound to one API token. Every
call opens its own httpx client, so concurrent requests share no connection
state.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ...exceptions import UpstreamError, UpstreamRejected, UpstreamTimeout
from .normalize import extract_error_codes, normalize_error_payload

logger = logging.getLogger(__name__)


def error_from_response(status_code: int, payload: Any):
    """
    Map a failed upstream response to a ConsoleError.

    4xx mirrors into UpstreamRejected, 5xx into UpstreamError. A 2xx that
    still reports success=false is treated as a bad gateway.
    """
    error, message = normalize_error_payload(payload)

    if 400 <= status_code < 500:
        exc = UpstreamRejected(error, message, status_code=status_code)
    elif status_code >= 500:
        exc = UpstreamError(error, message, status_code=status_code)
    else:
        exc = UpstreamError(error, message, status_code=502)

    exc.upstream_status = status_code
    exc.upstream_codes = extract_error_codes(payload)
    return exc


class CloudflareClient:
    """Client for the Cloudflare v4 API bound to a single API token."""

    def __init__(
        self,
        api_token: str,
        base_url: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        account_id: Optional[str] = None,
    ):
        """
        Initialize the Cloudflare API client.

        Args:
            api_token: Cloudflare API token sent as a bearer credential
            base_url: API base URL, e.g. https://api.cloudflare.com/client/v4
            timeout: Per-call timeout in seconds
            transport: Optional httpx transport (tests)
            account_id: Local account id, used only for log context
        """
        self._api_token = api_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.account_id = account_id
        self._transport = transport

    def __repr__(self) -> str:
        return f"CloudflareClient(account_id={self.account_id!r}, base_url={self.base_url!r})"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an authenticated request to the Cloudflare API.

        Args:
            method: HTTP method
            endpoint: API path, e.g. '/zones'
            params: Query parameters (optional)
            data: JSON body for POST/PUT/PATCH (optional)

        Returns:
            The 'result' field of the Cloudflare response

        Raises:
            UpstreamTimeout: If the call exceeded the timeout
            UpstreamError: On network failure or a 5xx response
            UpstreamRejected: On a 4xx response
        """
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    endpoint,
                    headers=self._headers(),
                    params=params,
                    json=data,
                )
        except httpx.TimeoutException:
            logger.warning(f"Cloudflare {method} {endpoint} timed out (account {self.account_id})")
            raise UpstreamTimeout(message=f"No response from Cloudflare within {self.timeout:g}s")
        except httpx.RequestError as e:
            logger.warning(f"Cloudflare {method} {endpoint} failed (account {self.account_id}): {type(e).__name__}")
            raise UpstreamError(message=f"Request to Cloudflare API failed: {type(e).__name__}")

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.is_success and isinstance(payload, dict) and payload.get("success", True) is not False:
            return payload.get("result")

        if payload is None:
            payload = f"Unexpected response from Cloudflare API (HTTP {response.status_code})"

        exc = error_from_response(response.status_code, payload)
        logger.warning(
            f"Cloudflare {method} {endpoint} returned {response.status_code} "
            f"(account {self.account_id}): {exc.error}"
        )
        raise exc

    async def verify_token(self) -> Dict[str, Any]:
        """Check the bound token ("who am I"). Returns {id, status, ...}."""
        return await self._request("GET", "/user/tokens/verify")

    async def list_zones(self, params: Optional[Dict[str, Any]] = None):
        """List zones visible to the token."""
        return await self._request("GET", "/zones", params=params)

    async def get_zone(self, zone_id: str):
        """Get a single zone."""
        return await self._request("GET", f"/zones/{zone_id}")

    async def list_dns_records(self, zone_id: str, params: Optional[Dict[str, Any]] = None):
        """List DNS records of a zone, forwarding filters such as type/name/page."""
        return await self._request("GET", f"/zones/{zone_id}/dns_records", params=params)

    async def create_dns_record(self, zone_id: str, record: Dict[str, Any]):
        """Create a DNS record."""
        return await self._request("POST", f"/zones/{zone_id}/dns_records", data=record)

    async def update_dns_record(self, zone_id: str, record_id: str, record: Dict[str, Any]):
        """Replace a DNS record."""
        return await self._request("PUT", f"/zones/{zone_id}/dns_records/{record_id}", data=record)

    async def delete_dns_record(self, zone_id: str, record_id: str):
        """Delete a DNS record. Returns {id} of the deleted record."""
        return await self._request("DELETE", f"/zones/{zone_id}/dns_records/{record_id}")
