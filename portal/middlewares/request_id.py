"""Request correlation for the portal's JSON logs.

Every request gets an ``X-Request-ID`` (echoed from the client or freshly
generated) and an ``X-Response-Time`` header, and produces one
``request.completed`` log line when it finishes.

Two context variables carry per-request identity into ``JsonLogFormatter``:
``request_id_ctx_var`` and ``principal_ctx_var``. The access guard and the
session dependency set the principal (``user:<id>``) once a session token has
been decoded. They also store it on ``request.state.principal`` because
values set inside ``call_next`` are not visible here afterwards.
"""

from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
principal_ctx_var: ContextVar[str | None] = ContextVar("principal_id", default=None)
logger = logging.getLogger("portal.request")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Outermost portal middleware: request id, timing and the ``request.completed`` line."""

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or uuid4().hex
        request_token = request_id_ctx_var.set(request_id)
        principal_token = principal_ctx_var.set(None)
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start) * 1000
            principal = getattr(request.state, "principal", None)
            response.headers[self.header_name] = request_id
            response.headers.setdefault("X-Response-Time", f"{duration_ms:.2f}ms")
            extra = {
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            }
            if principal:
                # Anonymous dashboard hits show up as 307s without a principal.
                extra["principal"] = principal
            logger.info("request.completed", extra={"extra_data": extra})
            return response
        finally:
            request_id_ctx_var.reset(request_token)
            principal_ctx_var.reset(principal_token)
