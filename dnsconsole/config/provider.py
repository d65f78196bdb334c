"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

DEFAULT_CLOUDFLARE_API_BASE_URL = "https://api.cloudflare.com/client/v4"
DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://127.0.0.1:5173"


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    prefix: str
    log_level: str
    cors_origins: List[str] = field(default_factory=list)


@dataclass
class AuthConfig:
    """Operator login and session token configuration."""
    config_path: str
    jwt_secret: Optional[str] = None
    token_expiry: Optional[str] = None


@dataclass
class StoreConfig:
    """Credential store configuration."""
    path: str
    allow_overwrite: bool = False


@dataclass
class UpstreamConfig:
    """Cloudflare API configuration."""
    base_url: str = DEFAULT_CLOUDFLARE_API_BASE_URL
    timeout: float = 15.0
    verify_permissions: bool = True


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration."""
        ...

    def get_store_config(self) -> StoreConfig:
        """Get credential store configuration."""
        ...

    def get_upstream_config(self) -> UpstreamConfig:
        """Get Cloudflare API configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
        client_url = os.getenv("CLIENT_URL")
        if client_url:
            origins.append(client_url)

        prefix = os.getenv("API_PREFIX", "/api").strip().rstrip("/")
        if prefix and not prefix.startswith("/"):
            prefix = f"/{prefix}"

        return APIConfig(
            port=int(os.getenv("API_PORT", os.getenv("PORT", "3005"))),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=_env_bool("API_DEBUG"),
            prefix=prefix,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            cors_origins=[origin.strip() for origin in origins if origin.strip()],
        )

    def get_auth_config(self) -> AuthConfig:
        """Get authentication configuration from environment variables.

        JWT_SECRET and TOKEN_EXPIRY override the settings block of the
        operator config file when set.
        """
        return AuthConfig(
            config_path=os.getenv("AUTH_CONFIG_PATH", "auth.json"),
            jwt_secret=os.getenv("JWT_SECRET") or None,
            token_expiry=os.getenv("TOKEN_EXPIRY") or None,
        )

    def get_store_config(self) -> StoreConfig:
        """Get credential store configuration from environment variables."""
        return StoreConfig(
            path=os.getenv("ACCOUNTS_FILE", "accounts.json"),
            allow_overwrite=_env_bool("CREDENTIALS_ALLOW_OVERWRITE"),
        )

    def get_upstream_config(self) -> UpstreamConfig:
        """Get Cloudflare API configuration from environment variables."""
        return UpstreamConfig(
            base_url=os.getenv("CLOUDFLARE_API_BASE_URL", DEFAULT_CLOUDFLARE_API_BASE_URL).rstrip("/"),
            timeout=float(os.getenv("UPSTREAM_TIMEOUT", "15")),
            verify_permissions=_env_bool("UPSTREAM_VERIFY_PERMISSIONS", "true"),
        )
