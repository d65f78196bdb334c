"""
Authentication Factory following Black Box Design principles.

This factory:
- Loads operators and session settings from configuration
- Resolves the signing secret and token expiry
- Returns only the authenticator (hiding how it was assembled)
"""

import logging
import secrets

from ...config.provider import ConfigProvider
from .auth import DEFAULT_TOKEN_EXPIRY, SessionAuthenticator
from .operators import load_operator_config

logger = logging.getLogger(__name__)


class AuthFactory:
    """Composition root for the authentication stack."""

    @staticmethod
    def build(config_provider: ConfigProvider) -> SessionAuthenticator:
        """
        Build the session authenticator.

        Precedence for the signing secret and expiry: environment, then the
        operator config file settings, then defaults. Without any configured
        secret a random one is generated, so sessions do not survive restarts.

        Args:
            config_provider: Configuration provider

        Returns:
            SessionAuthenticator ready for use
        """
        auth_config = config_provider.get_auth_config()
        operators, settings = load_operator_config(auth_config.config_path)

        secret = auth_config.jwt_secret or settings.get("jwt_secret")
        if not secret:
            logger.warning(
                "No JWT secret configured (JWT_SECRET or settings.jwt_secret); "
                "using a random per-process secret, sessions will not survive a restart"
            )
            secret = secrets.token_urlsafe(48)

        token_expiry = auth_config.token_expiry or settings.get("token_expiry") or DEFAULT_TOKEN_EXPIRY

        if not operators:
            logger.warning("No operators configured; login is disabled")

        logger.info(f"Session authenticator ready ({len(operators)} operator(s), token expiry {token_expiry})")
        return SessionAuthenticator(operators, str(secret), token_expiry)
