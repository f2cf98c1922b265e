from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..core.auth import auth_options
from ..core.jinja import get_templates
from ..deps.auth import get_server_session
from ..schemas.auth import ServerSession

router = APIRouter()
templates = get_templates()


@router.get("/", response_class=HTMLResponse)
def home_page(request: Request, session: ServerSession | None = Depends(get_server_session)):
    context = {
        "request": request,
        "user": session.user if session else None,
        "signin_path": auth_options.pages.sign_in,
    }
    return templates.TemplateResponse(request, "home.html", context)
