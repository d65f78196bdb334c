"""
Authentication Module - Black Box Interface

Purpose: Operator login and session tokens
Interface: authenticate(), issue_token(), verify_token(), AuthFactory.build()
Hidden: Token format, signing algorithm, password hashing, operator file format

This module can be replaced with any other session mechanism without
affecting the middleware or the API routes.
"""

from .auth import Identity, SessionAuthenticator, SessionToken, parse_duration
from .factory import AuthFactory
from .operators import Operator, load_operator_config
from .passwords import hash_password, verify_password

__all__ = [
    "AuthFactory",
    "Identity",
    "Operator",
    "SessionAuthenticator",
    "SessionToken",
    "hash_password",
    "load_operator_config",
    "parse_duration",
    "verify_password",
]
