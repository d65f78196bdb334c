#!/usr/bin/env python3
"""
dnsconsole - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes modules
3. Wires routers, access control and error handling into one FastAPI app

All business logic is in the modules, following black box principles.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dnsconsole import __version__
from dnsconsole.config.provider import ConfigProvider, EnvConfigProvider
from dnsconsole.exceptions import ConsoleError
from dnsconsole.modules.api import (
    create_accounts_router,
    create_auth_router,
    create_dns_router,
    create_health_router,
)
from dnsconsole.modules.auth import AuthFactory
from dnsconsole.modules.credentials import CredentialStore
from dnsconsole.modules.middleware import create_session_middleware
from dnsconsole.modules.upstream import UpstreamGateway

logger = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, message: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": error, "message": message or error},
    )


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Request body is invalid"


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as the {success, error, message} envelope."""

    @app.exception_handler(ConsoleError)
    async def console_error_handler(request: Request, exc: ConsoleError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
        return _error_response(exc.status_code, detail)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error_response(400, "Validation error", _describe_validation_errors(exc))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error_response(500, "Internal server error", "An unexpected error occurred")


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Build the dnsconsole FastAPI application.

    Args:
        config_provider: Configuration source (environment by default)
        transport: Optional httpx transport for Cloudflare calls (tests)

    Returns:
        Configured FastAPI app; modules are exposed on app.state
    """
    config_provider = config_provider or EnvConfigProvider()
    api_config = config_provider.get_api_config()
    store_config = config_provider.get_store_config()

    authenticator = AuthFactory.build(config_provider)
    store = CredentialStore(store_config.path, allow_overwrite=store_config.allow_overwrite)
    gateway = UpstreamGateway(store, config_provider.get_upstream_config(), transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting dnsconsole API...")
        if len(store) == 0:
            logger.warning("No Cloudflare accounts configured yet; add one via POST /accounts")
        else:
            logger.info(f"{len(store)} Cloudflare account(s) configured")
        yield
        logger.info("dnsconsole API shutdown complete")

    app = FastAPI(
        title="dnsconsole API",
        description="Multi-account Cloudflare DNS administration backend",
        version=__version__,
        lifespan=lifespan,
        debug=api_config.debug,
    )

    app.state.config_provider = config_provider
    app.state.authenticator = authenticator
    app.state.credential_store = store
    app.state.gateway = gateway

    register_exception_handlers(app)

    # Access control runs inside CORS so preflights and error responses carry CORS headers
    app.middleware("http")(create_session_middleware(authenticator, prefix=api_config.prefix))
    app.add_middleware(
        CORSMiddleware,
        allow_origins=api_config.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    prefix = api_config.prefix
    app.include_router(create_health_router(store), prefix=prefix)
    app.include_router(create_auth_router(authenticator), prefix=prefix)
    app.include_router(create_accounts_router(store, gateway), prefix=prefix)
    app.include_router(create_dns_router(gateway), prefix=prefix)

    return app


if __name__ == "__main__":
    from dnsconsole.cli import main

    main()
