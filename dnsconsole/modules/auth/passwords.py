"""
Salted password hashing for operator accounts.

Hashes are werkzeug's ``<method>$<salt>$<hash>`` strings, e.g.
``scrypt:32768:8:1$...`` or ``pbkdf2:sha256:600000$...``.
"""

from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

DEFAULT_METHOD = "scrypt"
SUPPORTED_METHODS = ("scrypt", "pbkdf2")


def hash_password(password: str, method: str = DEFAULT_METHOD) -> str:
    """
    Hash a password with a random salt.

    Args:
        password: Plaintext password
        method: werkzeug hash method, e.g. "scrypt" or "pbkdf2:sha256:600000"

    Returns:
        Encoded hash string suitable for the operator config file
    """
    return generate_password_hash(password, method=method)


def is_password_hash(value: Optional[str]) -> bool:
    """Check whether a string looks like an encoded hash from hash_password."""
    if not isinstance(value, str) or value.count("$") < 2:
        return False
    method = value.split("$", 1)[0]
    return method.split(":", 1)[0] in SUPPORTED_METHODS


def verify_password(password: str, encoded: Optional[str]) -> bool:
    """
    Compare a plaintext password against an encoded hash.

    Malformed hashes simply fail verification.
    """
    if not is_password_hash(encoded):
        return False
    try:
        return check_password_hash(encoded, password)
    except (ValueError, TypeError):
        return False
