"""Baseline security headers on every response.

Headers already set by a route are left alone.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-DNS-Prefetch-Control": "off",
}


def apply_security_headers(headers) -> None:
    # `headers` is a Starlette MutableHeaders at runtime; any mapping works in tests
    for key, value in SECURITY_HEADERS.items():
        if headers.get(key) is None:
            headers[key] = value


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        apply_security_headers(response.headers)
        return response
