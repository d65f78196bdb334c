"""
Operator account loading.

Operators and session settings come from a single structured file (YAML or
JSON) read once at process start:

    users:
      - username: admin
        password_hash: scrypt:32768:8:1$...
        role: admin
    settings:
      jwt_secret: change-me
      token_expiry: 24h
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml

from .passwords import hash_password, is_password_hash

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "admin"


@dataclass(frozen=True)
class Operator:
    """A statically configured console operator."""
    username: str
    password_hash: str = field(repr=False)
    role: str = DEFAULT_ROLE


def _parse_operator(entry: Any, index: int) -> Operator:
    if not isinstance(entry, dict):
        raise ValueError(f"users[{index}] must be a mapping")

    username = entry.get("username")
    if not isinstance(username, str) or not username:
        raise ValueError(f"users[{index}] is missing a username")

    password_hash = entry.get("password_hash")
    if password_hash is not None:
        if not is_password_hash(password_hash):
            raise ValueError(f"users[{index}] ({username}) has a malformed password_hash")
    else:
        password = entry.get("password")
        if not isinstance(password, str) or not password:
            raise ValueError(f"users[{index}] ({username}) has neither password_hash nor password")
        logger.warning(
            f"Operator '{username}' has a plaintext password in the config file; "
            "replace it with a password_hash (dnsconsole hash-password)"
        )
        password_hash = hash_password(password)

    role = entry.get("role") or DEFAULT_ROLE
    return Operator(username=username, password_hash=password_hash, role=str(role))


def parse_operator_config(data: Any) -> Tuple[List[Operator], Dict[str, Any]]:
    """
    Parse an already-loaded operator config document.

    Args:
        data: Parsed YAML/JSON document

    Returns:
        Tuple of (operators, settings dict)

    Raises:
        ValueError: If the document shape is invalid
    """
    if data is None:
        return [], {}
    if not isinstance(data, dict):
        raise ValueError("operator config must be a mapping with 'users' and 'settings'")

    users = data.get("users") or []
    if not isinstance(users, list):
        raise ValueError("'users' must be a list")

    settings = data.get("settings") or {}
    if not isinstance(settings, dict):
        raise ValueError("'settings' must be a mapping")

    operators: List[Operator] = []
    seen = set()
    for index, entry in enumerate(users):
        operator = _parse_operator(entry, index)
        if operator.username in seen:
            raise ValueError(f"duplicate operator username: {operator.username}")
        seen.add(operator.username)
        operators.append(operator)

    return operators, settings


def load_operator_config(path: str) -> Tuple[List[Operator], Dict[str, Any]]:
    """
    Load operators and session settings from disk.

    A missing or unreadable file leaves the console with no operators (nobody
    can log in) but does not stop the process from starting.
    """
    config_path = Path(path)
    if not config_path.exists():
        logger.warning(f"Operator config file not found: {config_path}; no operator can log in")
        return [], {}

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        operators, settings = parse_operator_config(data)
    except (OSError, yaml.YAMLError, ValueError) as e:
        logger.error(f"Failed to load operator config {config_path}: {e}")
        return [], {}

    logger.info(f"Loaded {len(operators)} operator(s) from {config_path}")
    return operators, settings
