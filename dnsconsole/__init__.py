"""
dnsconsole - Multi-account Cloudflare DNS administration backend

Holds per-account Cloudflare API credentials and proxies authorized DNS
calls for an authenticated operator.

Architecture:
- Each module is self-contained with a small public interface
- Modules are wired together only in main.create_app()
- No module reaches into another module's internals

Modules:
- auth: Operator login and signed session tokens
- middleware: Bearer-token access control for protected routes
- credentials: Durable store of Cloudflare account credentials
- upstream: Authenticated Cloudflare API clients and error normalization
- api: REST API routes and request models
"""

__version__ = "1.0.0"
