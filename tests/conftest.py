"""
Shared pytest fixtures for dnsconsole tests.

This module provides common fixtures including:
- FakeCloudflare: httpx.MockTransport handler with canned Cloudflare responses
- A config provider pointing at temp-dir operator and account files
- FastAPI test client utilities
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple, Union

import httpx
import pytest
import yaml
from fastapi.testclient import TestClient

from dnsconsole.config.provider import APIConfig, AuthConfig, StoreConfig, UpstreamConfig
from dnsconsole.main import create_app
from dnsconsole.modules.auth import hash_password

CLOUDFLARE_BASE_URL = "https://cloudflare.test/client/v4"
JWT_SECRET = "test-signing-secret-0123456789abcdef"
ADMIN_PASSWORD = "correct horse battery staple"
VALID_CF_TOKEN = "cf-valid-token"
# Low-cost hash method so fixtures stay fast
FAST_HASH_METHOD = "pbkdf2:sha256:1000"


# =============================================================================
# Cloudflare API Mocking Infrastructure
# =============================================================================


def cf_success(result: Any) -> Dict[str, Any]:
    """Cloudflare success envelope."""
    return {"success": True, "errors": [], "messages": [], "result": result}


def cf_failure(code: int, message: str) -> Dict[str, Any]:
    """Cloudflare failure envelope with a single error."""
    return {"success": False, "errors": [{"code": code, "message": message}], "messages": [], "result": None}


@dataclass
class CloudflareCall:
    """Record of a request made against the fake Cloudflare API."""
    method: str
    path: str
    params: List[Tuple[str, str]]
    token: Optional[str]
    body: Optional[bytes] = None


@dataclass
class _Route:
    method: str
    pattern: Pattern
    status: int = 200
    body: Any = None
    raises: Optional[type] = None
    handler: Optional[Callable[[httpx.Request], httpx.Response]] = None


class FakeCloudflare:
    """
    Fake Cloudflare v4 API for httpx.MockTransport.

    Routes are matched on method and path (relative to the API base path);
    the most recently registered match wins.

    Usage:
        def test_zones(cloudflare):
            cloudflare.register("GET", "/zones", body=cf_success([{"id": "z1"}]))
            ...
            assert cloudflare.was_called("GET", "/zones")
    """

    def __init__(self, base_path: str = "/client/v4"):
        self.base_path = base_path
        self._routes: List[_Route] = []
        self.calls: List[CloudflareCall] = []

    def register(
        self,
        method: str,
        path: Union[str, Pattern],
        status: int = 200,
        body: Any = None,
        raises: Optional[type] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> "FakeCloudflare":
        """Register a canned response (or an exception type to raise) for a route."""
        pattern = path if isinstance(path, re.Pattern) else re.compile(f"^{re.escape(path)}$")
        self._routes.append(_Route(method.upper(), pattern, status, body, raises, handler))
        return self

    def accept_token(self, token: str = VALID_CF_TOKEN) -> "FakeCloudflare":
        """Make token verification and the zone read check succeed."""
        self.register("GET", "/user/tokens/verify", body=cf_success({"id": "tok-1", "status": "active"}))
        self.register("GET", "/zones", body=cf_success([]))
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith(self.base_path):
            path = path[len(self.base_path):]

        auth_header = request.headers.get("authorization", "")
        token = auth_header[len("Bearer "):] if auth_header.startswith("Bearer ") else None
        self.calls.append(
            CloudflareCall(request.method, path, list(request.url.params.multi_items()), token, request.content)
        )

        for route in reversed(self._routes):
            if route.method == request.method and route.pattern.match(path):
                if route.raises is not None:
                    raise route.raises("simulated failure", request=request)
                if route.handler is not None:
                    return route.handler(request)
                return httpx.Response(route.status, json=route.body)

        return httpx.Response(404, json=cf_failure(7003, "No route for that URI"))

    def was_called(self, method: str, path: str) -> bool:
        return any(call.method == method and call.path == path for call in self.calls)

    def calls_to(self, method: str, path: str) -> List[CloudflareCall]:
        return [call for call in self.calls if call.method == method and call.path == path]


@pytest.fixture
def cloudflare():
    """Fake Cloudflare API."""
    return FakeCloudflare()


@pytest.fixture
def transport(cloudflare):
    """httpx transport routed to the fake Cloudflare API."""
    return httpx.MockTransport(cloudflare)


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class StaticConfigProvider:
    """ConfigProvider returning fixed dataclasses (no environment access)."""
    api: APIConfig
    auth: AuthConfig
    store: StoreConfig
    upstream: UpstreamConfig = field(default_factory=lambda: UpstreamConfig(base_url=CLOUDFLARE_BASE_URL))

    def get_api_config(self) -> APIConfig:
        return self.api

    def get_auth_config(self) -> AuthConfig:
        return self.auth

    def get_store_config(self) -> StoreConfig:
        return self.store

    def get_upstream_config(self) -> UpstreamConfig:
        return self.upstream


@pytest.fixture
def auth_file(tmp_path):
    """Operator config file with an admin and a viewer."""
    path = tmp_path / "auth.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "users": [
                    {
                        "username": "admin",
                        "password_hash": hash_password(ADMIN_PASSWORD, method=FAST_HASH_METHOD),
                        "role": "admin",
                    },
                    {
                        "username": "viewer",
                        "password_hash": hash_password("viewer-pass", method=FAST_HASH_METHOD),
                        "role": "viewer",
                    },
                ],
                "settings": {"token_expiry": "1h"},
            }
        )
    )
    return path


@pytest.fixture
def accounts_file(tmp_path):
    """Path of the (initially absent) credential store file."""
    return tmp_path / "data" / "accounts.json"


@pytest.fixture
def config_provider(auth_file, accounts_file):
    """Config provider pointing at temp-dir files and the fake Cloudflare API."""
    return StaticConfigProvider(
        api=APIConfig(
            port=3005,
            host="127.0.0.1",
            debug=False,
            prefix="/api",
            log_level="DEBUG",
            cors_origins=["http://localhost:5173"],
        ),
        auth=AuthConfig(config_path=str(auth_file), jwt_secret=JWT_SECRET),
        store=StoreConfig(path=str(accounts_file)),
    )


# =============================================================================
# FastAPI Test Client
# =============================================================================


@pytest.fixture
def app(config_provider, transport):
    """dnsconsole app wired to the fake Cloudflare API."""
    return create_app(config_provider, transport=transport)


@pytest.fixture
def client(app):
    """Test client running the app lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    """Authorization header for a logged-in admin."""
    response = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def stored_account(client, auth_headers, cloudflare):
    """An account 'acct1' added through the API."""
    cloudflare.accept_token()
    response = client.post(
        "/api/accounts",
        json={"id": "acct1", "name": "Main", "token": VALID_CF_TOKEN},
        headers=auth_headers,
    )
    assert response.status_code == 200
    cloudflare.calls.clear()
    return "acct1"
