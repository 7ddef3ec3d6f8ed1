"""
Response headers for the JSON API.

Public document links and client portal pages are opened by clients from
email, so they get the same hardening as the contractor API but are allowed
to be framed by the frontend that renders them.
"""

import logging
import os
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from .config import FRONTEND_URL

logger = logging.getLogger(__name__)

IS_PRODUCTION = os.getenv("ENVIRONMENT", "development").lower() == "production"

CLIENT_FACING_PREFIXES = ("/api/public", "/api/client-portal")

BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Permissions-Policy": "camera=(), geolocation=(), microphone=(), payment=(), usb=()",
}


def build_csp(frame_ancestors: str) -> str:
    return "; ".join(
        [
            "default-src 'none'",
            f"frame-ancestors {frame_ancestors}",
            "base-uri 'none'",
            "form-action 'none'",
        ]
    )


API_CSP = build_csp("'none'")
CLIENT_FACING_CSP = build_csp(f"'self' {FRONTEND_URL}")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or []

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        path = request.url.path
        if any(path.startswith(excluded) for excluded in self.exclude_paths):
            return response

        response.headers.update(BASE_HEADERS)
        if path.startswith(CLIENT_FACING_PREFIXES):
            response.headers["X-Frame-Options"] = "SAMEORIGIN"
            response.headers["Content-Security-Policy"] = CLIENT_FACING_CSP
        else:
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Content-Security-Policy"] = API_CSP

        if IS_PRODUCTION:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # Contractor and client data must not sit in shared caches
        response.headers.setdefault("Cache-Control", "no-store")
        return response
