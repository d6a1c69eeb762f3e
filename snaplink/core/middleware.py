"""Security headers added to every response."""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

# Sent on every response, API and frontend alike. No Content-Security-Policy:
# the frontend bundle's needs are not known here.
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), geolocation=(), microphone=(), payment=()",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add `SECURITY_HEADERS`, plus HSTS when serving over HTTPS in production."""

    def __init__(self, app: ASGIApp, enable_hsts: bool = False, hsts_max_age: int = 31536000) -> None:
        super().__init__(app)
        self.hsts = f"max-age={hsts_max_age}; includeSubDomains" if enable_hsts else None

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        if self.hsts:
            response.headers["Strict-Transport-Security"] = self.hsts
        return response
