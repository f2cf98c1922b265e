from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from ..core.auth import read_session_token, session_from_token
from ..middlewares import principal_ctx_var
from ..schemas.auth import ServerSession


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


def get_server_session(request: Request) -> ServerSession | None:
    """Current visitor's session, re-validated from the cookie on every call."""

    payload = read_session_token(request)
    if payload is None:
        return None
    _set_principal(request, f"user:{payload.sub}")
    return session_from_token(payload)


def require_session(session: ServerSession | None = Depends(get_server_session)) -> ServerSession:
    if session is None or session.user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Sign in required")
    return session
