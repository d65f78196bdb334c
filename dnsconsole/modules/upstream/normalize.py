"""
Normalization of Cloudflare error payloads.

Cloudflare reports problems in ``errors`` and ``messages`` fields whose shape
varies: a list of {code, message} objects, a single object, a bare string, or
nothing at all. Everything is flattened to plain strings here so raw upstream
JSON never reaches the API boundary.
"""

import json
from typing import Any, List, Optional, Tuple

DEFAULT_ERROR = "Cloudflare API error"
DEFAULT_MESSAGE = "Unknown error"


def stringify(value: Any) -> Optional[str]:
    """
    Recursively turn any JSON shape into a display string.

    Returns:
        The flattened string, or None when there is nothing to show
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, (list, tuple)):
        parts = [part for part in (stringify(item) for item in value) if part]
        return "; ".join(parts) or None
    if isinstance(value, dict):
        if value.get("message"):
            return stringify(value["message"])
        return json.dumps(value, sort_keys=True, default=str)
    return str(value)


def normalize_error_payload(payload: Any) -> Tuple[str, str]:
    """
    Build the (error, message) pair for an upstream failure payload.

    Args:
        payload: Parsed JSON body of the upstream response, or None

    Returns:
        Tuple of (error, message), both non-empty strings
    """
    if not isinstance(payload, dict):
        text = stringify(payload)
        return DEFAULT_ERROR, text or DEFAULT_MESSAGE

    error = stringify(payload.get("errors")) or DEFAULT_ERROR
    message = stringify(payload.get("messages")) or DEFAULT_MESSAGE
    return error, message


def extract_error_codes(payload: Any) -> List[int]:
    """Collect numeric Cloudflare error codes from an error payload."""
    if not isinstance(payload, dict):
        return []

    errors = payload.get("errors")
    if isinstance(errors, dict):
        errors = [errors]
    if not isinstance(errors, list):
        return []

    codes = []
    for item in errors:
        if isinstance(item, dict):
            try:
                codes.append(int(item.get("code")))
            except (TypeError, ValueError):
                continue
    return codes
