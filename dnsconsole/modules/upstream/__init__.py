"""
Upstream Module - Black Box Interface

Purpose: Authenticated access to the Cloudflare v4 API
Interface: UpstreamGateway.for_account(), verify_new_token(), CloudflareClient
Hidden: HTTP client, token headers, error payload shapes

All upstream failures leave this module as ConsoleError subclasses carrying
plain-string error/message pairs.
"""

from .client import CloudflareClient
from .gateway import UpstreamGateway, classify_rejection
from .normalize import normalize_error_payload, stringify

__all__ = [
    "CloudflareClient",
    "UpstreamGateway",
    "classify_rejection",
    "normalize_error_payload",
    "stringify",
]
