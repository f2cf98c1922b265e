from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Avatars are hosted by whichever identity provider issued the profile, so
# images may come from any https origin.
CONTENT_SECURITY_POLICY = (
    "default-src 'self'; img-src 'self' https: data:; base-uri 'self'; "
    "form-action 'self'; frame-ancestors 'none'; object-src 'none';"
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Attach a baseline set of security headers for browser clients."""

    def __init__(self, app, *, hsts: bool = False, no_store_prefixes: tuple[str, ...] = ()) -> None:  # type: ignore[override]
        super().__init__(app)
        self.hsts = hsts
        self.no_store_prefixes = no_store_prefixes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        if self.hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        # Authenticated pages must never be served from a shared cache.
        if self.no_store_prefixes and request.url.path.startswith(self.no_store_prefixes):
            response.headers.setdefault("Cache-Control", "no-store")
        return response
