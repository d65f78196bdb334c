"""
Session authentication for dnsconsole operators.

This module validates operator logins and issues stateless, signed session
tokens (HS256 JWTs). A token is valid iff its signature verifies under the
process signing secret and it has not expired. There is no server-side
revocation list: logging out only discards the token on the client, so a
token stays usable until it expires.
"""

import logging
import re
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Dict, Iterable, Optional

import jwt

from ...exceptions import AuthFailure
from ...logging_config import audit_event
from .operators import Operator
from .passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEFAULT_TOKEN_EXPIRY = "24h"

_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]*)\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "": 1,
    "ms": 0.001, "msec": 0.001, "msecs": 0.001, "millisecond": 0.001, "milliseconds": 0.001,
    "s": 1, "sec": 1, "secs": 1, "second": 1, "seconds": 1,
    "m": 60, "min": 60, "mins": 60, "minute": 60, "minutes": 60,
    "h": 3600, "hr": 3600, "hrs": 3600, "hour": 3600, "hours": 3600,
    "d": 86400, "day": 86400, "days": 86400,
    "w": 604800, "week": 604800, "weeks": 604800,
}


def parse_duration(value) -> timedelta:
    """
    Parse a token lifetime such as "24h", "30m", "7d" or a number of seconds.

    Raises:
        ValueError: If the value is not a recognizable duration of at least one second
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = float(value)
    else:
        match = _DURATION_RE.match(str(value))
        if not match or match.group(2).lower() not in _DURATION_UNITS:
            raise ValueError(f"Invalid duration: {value!r}")
        seconds = float(match.group(1)) * _DURATION_UNITS[match.group(2).lower()]

    if seconds < 1:
        raise ValueError(f"Duration must be at least one second: {value!r}")
    return timedelta(seconds=seconds)


@dataclass(frozen=True)
class Identity:
    """Verified operator identity extracted from a session token."""
    username: str
    role: str
    issued_at: datetime
    expires_at: datetime

    def to_user(self) -> Dict[str, str]:
        return {"username": self.username, "role": self.role}


@dataclass(frozen=True)
class SessionToken:
    """A freshly issued session token and the identity it asserts."""
    token: str
    identity: Identity


class SessionAuthenticator:
    """
    Operator login and session token lifecycle.

    The signing secret and expiry policy are fixed at construction and treated
    as immutable process-wide configuration.
    """

    def __init__(
        self,
        operators: Iterable[Operator],
        signing_secret: str,
        token_expiry: str = DEFAULT_TOKEN_EXPIRY,
    ):
        """
        Initialize the authenticator.

        Args:
            operators: Statically configured operators
            signing_secret: HMAC secret used to sign and verify tokens
            token_expiry: Token lifetime, e.g. "24h"
        """
        if not signing_secret:
            raise ValueError("signing_secret must not be empty")

        self._operators: Dict[str, Operator] = {op.username: op for op in operators}
        self._secret = signing_secret
        self.token_lifetime = parse_duration(token_expiry)

        # Checked for unknown usernames so both failure paths cost the same
        self._dummy_hash = hash_password(secrets.token_urlsafe(16))

    @property
    def operator_count(self) -> int:
        return len(self._operators)

    def authenticate(self, username: str, password: str) -> SessionToken:
        """
        Validate operator credentials and issue a session token.

        Args:
            username: Operator username (exact match)
            password: Plaintext password

        Returns:
            SessionToken for the operator

        Raises:
            AuthFailure: If the credentials do not match; the error does not
                reveal whether the username exists
        """
        operator = self._operators.get(username) if isinstance(username, str) else None

        if operator is None:
            verify_password(password or "", self._dummy_hash)
            matched = False
        else:
            matched = verify_password(password or "", operator.password_hash)

        if not matched:
            audit_event("login_failed", {"username": username})
            raise AuthFailure()

        session = self.issue_token(operator)
        audit_event("login_succeeded", {"username": operator.username, "role": operator.role})
        return session

    def issue_token(self, operator: Operator, now: Optional[datetime] = None) -> SessionToken:
        """
        Sign a session token for an operator.

        Args:
            operator: Operator the token asserts
            now: Issue time override (tests only)

        Returns:
            SessionToken with the encoded JWT and its identity
        """
        issued_at = (now or datetime.now(UTC)).replace(microsecond=0)
        expires_at = issued_at + self.token_lifetime

        claims = {
            "sub": operator.username,
            "username": operator.username,
            "role": operator.role,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        token = jwt.encode(claims, self._secret, algorithm=ALGORITHM)

        return SessionToken(
            token=token,
            identity=Identity(
                username=operator.username,
                role=operator.role,
                issued_at=issued_at,
                expires_at=expires_at,
            ),
        )

    def verify_token(self, token: Optional[str]) -> Optional[Identity]:
        """
        Verify a session token.

        Args:
            token: Encoded token (attacker-controlled)

        Returns:
            Identity if the signature verifies and the token has not expired,
            None for anything else. Never raises for malformed input.
        """
        if not token or not isinstance(token, str):
            return None

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_iat": True,
                    "require": ["exp", "iat", "username"],
                },
            )
        except jwt.ExpiredSignatureError:
            logger.debug("Session token expired")
            return None
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid session token: {e}")
            return None
        except (ValueError, TypeError) as e:
            logger.debug(f"Unparseable session token: {e}")
            return None

        username = claims.get("username")
        role = claims.get("role")
        if not isinstance(username, str) or not username:
            return None

        return Identity(
            username=username,
            role=role if isinstance(role, str) else "",
            issued_at=datetime.fromtimestamp(claims["iat"], UTC),
            expires_at=datetime.fromtimestamp(claims["exp"], UTC),
        )
