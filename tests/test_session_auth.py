"""
Unit tests for operator session authentication.
"""

import json
import logging
from datetime import UTC, datetime, timedelta

import jwt
import pytest

from conftest import FAST_HASH_METHOD
from dnsconsole.exceptions import AuthFailure
from dnsconsole.logging_config import AUDIT_LOGGER_NAME
from dnsconsole.modules.auth import Operator, SessionAuthenticator, hash_password, parse_duration

SECRET = "unit-test-signing-secret-0123456789abcdef"


@pytest.fixture
def operators():
    return [
        Operator("admin", hash_password("admin-pass", method=FAST_HASH_METHOD), "admin"),
        Operator("viewer", hash_password("viewer-pass", method=FAST_HASH_METHOD), "viewer"),
    ]


@pytest.fixture
def authenticator(operators):
    return SessionAuthenticator(operators, SECRET, "1h")


class TestParseDuration:
    """Test token expiry parsing."""

    @pytest.mark.parametrize(
        "value,seconds",
        [
            ("24h", 86400),
            ("30m", 1800),
            ("7d", 604800),
            ("1w", 604800),
            ("45s", 45),
            ("90", 90),
            (3600, 3600),
            ("2 hours", 7200),
            ("1500ms", 1.5),
        ],
    )
    def test_valid(self, value, seconds):
        assert parse_duration(value) == timedelta(seconds=seconds)

    @pytest.mark.parametrize("value", ["", "abc", "10 parsecs", "0", -5, "-1h", "500ms", "0.5s", 0.25])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestAuthenticate:
    """Test login."""

    def test_round_trip_preserves_identity(self, authenticator):
        session = authenticator.authenticate("viewer", "viewer-pass")

        identity = authenticator.verify_token(session.token)
        assert identity.username == "viewer"
        assert identity.role == "viewer"
        assert identity.expires_at - identity.issued_at == timedelta(hours=1)

    def test_wrong_password(self, authenticator):
        with pytest.raises(AuthFailure) as exc_info:
            authenticator.authenticate("admin", "wrong")

        assert exc_info.value.status_code == 401
        assert exc_info.value.error == "Invalid username or password"

    def test_unknown_user_indistinguishable(self, authenticator):
        with pytest.raises(AuthFailure) as unknown:
            authenticator.authenticate("nobody", "admin-pass")
        with pytest.raises(AuthFailure) as wrong:
            authenticator.authenticate("admin", "nope")

        assert unknown.value.to_envelope() == wrong.value.to_envelope()

    def test_username_is_case_sensitive(self, authenticator):
        with pytest.raises(AuthFailure):
            authenticator.authenticate("Admin", "admin-pass")

    def test_audit_events(self, authenticator, caplog):
        caplog.set_level(logging.INFO, logger=AUDIT_LOGGER_NAME)

        authenticator.authenticate("admin", "admin-pass")
        with pytest.raises(AuthFailure):
            authenticator.authenticate("admin", "bad")

        events = [json.loads(r.getMessage()) for r in caplog.records if r.name == AUDIT_LOGGER_NAME]
        assert [e["type"] for e in events] == ["login_succeeded", "login_failed"]
        assert "admin-pass" not in caplog.text
        assert "bad" not in json.dumps(events)

    def test_empty_secret_rejected(self, operators):
        with pytest.raises(ValueError):
            SessionAuthenticator(operators, "", "1h")

    def test_sub_second_lifetime_rejected(self, operators):
        with pytest.raises(ValueError, match="at least one second"):
            SessionAuthenticator(operators, SECRET, "500ms")


class TestVerifyToken:
    """Test session token verification."""

    def test_expired_token_invalid(self, authenticator, operators):
        past = datetime.now(UTC) - timedelta(hours=2)
        session = authenticator.issue_token(operators[0], now=past)

        assert authenticator.verify_token(session.token) is None

    def test_token_within_lifetime_valid(self, authenticator, operators):
        recent = datetime.now(UTC) - timedelta(minutes=30)
        session = authenticator.issue_token(operators[0], now=recent)

        assert authenticator.verify_token(session.token).username == "admin"

    def test_wrong_secret(self, authenticator, operators):
        other = SessionAuthenticator(operators, "another-signing-secret-0123456789abcdef", "1h")
        token = other.issue_token(operators[0]).token

        assert authenticator.verify_token(token) is None

    def test_tampered_claims(self, authenticator):
        token = authenticator.authenticate("viewer", "viewer-pass").token
        header, payload, signature = token.split(".")
        forged = jwt.encode(
            {"username": "admin", "role": "admin", "iat": 0, "exp": 9999999999},
            "attacker-guess-0123456789abcdef0123456789",
        )
        assert authenticator.verify_token(".".join([header, forged.split(".")[1], signature])) is None

    def test_none_algorithm_rejected(self, authenticator):
        now = int(datetime.now(UTC).timestamp())
        token = jwt.encode(
            {"username": "admin", "role": "admin", "iat": now, "exp": now + 3600}, None, algorithm="none"
        )
        assert authenticator.verify_token(token) is None

    def test_missing_claims(self, authenticator):
        now = int(datetime.now(UTC).timestamp())
        token = jwt.encode({"role": "admin", "iat": now, "exp": now + 3600}, SECRET, algorithm="HS256")
        assert authenticator.verify_token(token) is None

        token = jwt.encode({"username": "admin", "iat": now}, SECRET, algorithm="HS256")
        assert authenticator.verify_token(token) is None

    @pytest.mark.parametrize("garbage", [None, "", "abc", "a.b.c", "Bearer x", "ey.ey.ey", 42])
    def test_garbage_never_raises(self, authenticator, garbage):
        assert authenticator.verify_token(garbage) is None
