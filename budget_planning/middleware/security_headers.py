"""
Security headers middleware.

Adds the OWASP-recommended response headers for a JSON API:
X-Content-Type-Options, X-Frame-Options, Referrer-Policy,
Permissions-Policy, Cache-Control for authenticated payloads, and a
Content-Security-Policy that forbids loading anything at all.

The interactive documentation pages need scripts and styles from a CDN,
so they get a relaxed policy instead.

References:
- OWASP Secure Headers Project: https://owasp.org/www-project-secure-headers/
- OWASP REST Security Cheat Sheet: https://cheatsheetseries.owasp.org/cheatsheets/REST_Security_Cheat_Sheet.html
"""

from typing import Callable, Iterable, Optional
import logging

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


API_CSP_POLICY = "default-src 'none'; frame-ancestors 'none'"

DOCS_CSP_POLICY = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https://fastapi.tiangolo.com; "
    "frame-ancestors 'none'; "
    "object-src 'none'"
)

DEFAULT_DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")

PERMISSIONS_POLICY = (
    "geolocation=(), "
    "microphone=(), "
    "camera=(), "
    "payment=(), "
    "usb=()"
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to every response.

    Example:
        app.add_middleware(SecurityHeadersMiddleware)

    Args:
        app: ASGI application
        enable_csp: Whether to send Content-Security-Policy at all
        csp_policy: Policy for API responses (defaults to API_CSP_POLICY)
        docs_paths: Path prefixes that get DOCS_CSP_POLICY
    """

    def __init__(
        self,
        app,
        enable_csp: bool = True,
        csp_policy: Optional[str] = None,
        docs_paths: Iterable[str] = DEFAULT_DOCS_PATHS,
    ):
        super().__init__(app)
        self.enable_csp = enable_csp
        self.csp_policy = csp_policy or API_CSP_POLICY
        self.docs_paths = tuple(docs_paths)

        logger.info(
            "Security headers middleware initialized",
            extra={"enable_csp": enable_csp}
        )

    def _policy_for(self, path: str) -> str:
        if path.startswith(self.docs_paths):
            return DOCS_CSP_POLICY
        return self.csp_policy

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = PERMISSIONS_POLICY

        if self.enable_csp:
            response.headers["Content-Security-Policy"] = self._policy_for(request.url.path)

        # Balances and ledgers must not be cached by intermediaries
        if "Authorization" in request.headers:
            response.headers["Cache-Control"] = "no-store"

        return response
