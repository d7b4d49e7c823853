"""HTTP middleware for the MCP endpoint."""

from typing import Callable

from fastapi import Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import PlainTextResponse

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds browser hardening headers to every response."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class PreflightCORSMiddleware(CORSMiddleware):
    """
    CORS middleware whose preflight answer is always 200.

    The advertised Allow-* headers stay fixed to the configured whitelist;
    the browser enforces them, so requested headers or methods outside it
    are not rejected here.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        return PlainTextResponse("OK", status_code=200, headers=dict(self.preflight_headers))
