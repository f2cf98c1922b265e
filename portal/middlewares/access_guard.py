from __future__ import annotations

from typing import Callable, Iterable
from urllib.parse import urlencode

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from .request_id import principal_ctx_var


def path_is_protected(path: str, prefixes: Iterable[str]) -> bool:
    """``/dashboard`` covers ``/dashboard`` and ``/dashboard/...`` but not ``/dashboardx``."""

    for prefix in prefixes:
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


def access_redirect(path: str, token: object | None, prefixes: Iterable[str], signin_path: str) -> str | None:
    """Return the sign-in URL to redirect to, or None to let the request through."""

    if token is not None or not path_is_protected(path, prefixes):
        return None
    return f"{signin_path}?{urlencode({'callbackUrl': path})}"


class AccessGuardMiddleware(BaseHTTPMiddleware):
    """Send visitors without a session token away from protected paths.

    Must sit inside ``SessionMiddleware`` so the cookie session is decoded
    before ``token_reader`` runs.
    """

    def __init__(  # type: ignore[override]
        self,
        app,
        *,
        token_reader: Callable[[Request], object | None],
        protected_prefixes: Iterable[str],
        signin_path: str,
    ) -> None:
        super().__init__(app)
        self.token_reader = token_reader
        self.protected_prefixes = tuple(protected_prefixes)
        self.signin_path = signin_path

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        token = self.token_reader(request) if path_is_protected(path, self.protected_prefixes) else None
        target = access_redirect(path, token, self.protected_prefixes, self.signin_path)
        if target is not None:
            return RedirectResponse(url=target, status_code=307)
        subject = getattr(token, "sub", None)
        if subject:
            principal = f"user:{subject}"
            principal_ctx_var.set(principal)
            request.state.principal = principal
        return await call_next(request)
