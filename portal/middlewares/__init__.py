from __future__ import annotations

from .access_guard import AccessGuardMiddleware, access_redirect, path_is_protected
from .request_id import RequestIdMiddleware, principal_ctx_var, request_id_ctx_var
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "AccessGuardMiddleware",
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "access_redirect",
    "path_is_protected",
    "request_id_ctx_var",
    "principal_ctx_var",
]
