"""
Tests for environment-based configuration.
"""

import os
from unittest.mock import patch

from dnsconsole.config import EnvConfigProvider
from dnsconsole.config.provider import DEFAULT_CLOUDFLARE_API_BASE_URL


def test_defaults():
    with patch.dict(os.environ, {}, clear=True):
        provider = EnvConfigProvider()
        api = provider.get_api_config()
        auth = provider.get_auth_config()
        store = provider.get_store_config()
        upstream = provider.get_upstream_config()

    assert api.port == 3005
    assert api.host == "0.0.0.0"
    assert api.prefix == "/api"
    assert api.log_level == "INFO"
    assert api.debug is False
    assert "http://localhost:5173" in api.cors_origins
    assert auth.config_path == "auth.json"
    assert auth.jwt_secret is None
    assert auth.token_expiry is None
    assert store.path == "accounts.json"
    assert store.allow_overwrite is False
    assert upstream.base_url == DEFAULT_CLOUDFLARE_API_BASE_URL
    assert upstream.timeout == 15.0
    assert upstream.verify_permissions is True


def test_overrides():
    env = {
        "PORT": "8080",
        "API_PREFIX": "v1/",
        "LOG_LEVEL": "debug",
        "API_DEBUG": "yes",
        "CORS_ORIGINS": "https://a.example, https://b.example",
        "CLIENT_URL": "https://ui.example",
        "AUTH_CONFIG_PATH": "/etc/dnsconsole/auth.yaml",
        "JWT_SECRET": "s",
        "TOKEN_EXPIRY": "8h",
        "ACCOUNTS_FILE": "/var/lib/dnsconsole/accounts.json",
        "CREDENTIALS_ALLOW_OVERWRITE": "true",
        "CLOUDFLARE_API_BASE_URL": "https://cf.example/client/v4/",
        "UPSTREAM_TIMEOUT": "2.5",
        "UPSTREAM_VERIFY_PERMISSIONS": "0",
    }
    with patch.dict(os.environ, env, clear=True):
        provider = EnvConfigProvider()
        api = provider.get_api_config()
        auth = provider.get_auth_config()
        store = provider.get_store_config()
        upstream = provider.get_upstream_config()

    assert api.port == 8080
    assert api.prefix == "/v1"
    assert api.log_level == "DEBUG"
    assert api.debug is True
    assert api.cors_origins == ["https://a.example", "https://b.example", "https://ui.example"]
    assert auth.config_path == "/etc/dnsconsole/auth.yaml"
    assert auth.jwt_secret == "s"
    assert auth.token_expiry == "8h"
    assert store.path == "/var/lib/dnsconsole/accounts.json"
    assert store.allow_overwrite is True
    assert upstream.base_url == "https://cf.example/client/v4"
    assert upstream.timeout == 2.5
    assert upstream.verify_permissions is False


def test_api_port_wins_over_port():
    with patch.dict(os.environ, {"API_PORT": "9000", "PORT": "8080"}, clear=True):
        assert EnvConfigProvider().get_api_config().port == 9000


def test_empty_prefix_allowed():
    with patch.dict(os.environ, {"API_PREFIX": "/"}, clear=True):
        assert EnvConfigProvider().get_api_config().prefix == ""
