"""HTTP entry point for the session provider.

GET and POST are registered separately but share one handler; all behaviour
lives in ``portal.core.auth.AuthHandler``.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.auth import AUTH_BASE_PATH, auth_handler
from ..db.session import get_db

router = APIRouter(prefix=AUTH_BASE_PATH, tags=["auth"])


async def handle_auth(action: str, request: Request, db: Session = Depends(get_db)):
    return await auth_handler(request, action, db)


router.add_api_route("/{action:path}", handle_auth, methods=["GET"], include_in_schema=False)
router.add_api_route("/{action:path}", handle_auth, methods=["POST"], include_in_schema=False)
