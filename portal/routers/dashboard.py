from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..core.auth import AUTH_BASE_PATH, auth_options, ensure_csrf_token
from ..core.jinja import get_templates
from ..db.session import get_db
from ..deps.auth import get_server_session
from ..schemas.auth import ServerSession
from ..services.activity import get_user_activity

templates = get_templates()

router = APIRouter()

QUICK_LINKS = [
    ("Home", "/"),
    ("Blogs", "/blogs"),
    ("Contact", "/contact"),
]


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    session: ServerSession | None = Depends(get_server_session),
    db: Session = Depends(get_db),
):
    # Checked again here, independent of AccessGuardMiddleware.
    if session is None or session.user is None:
        return RedirectResponse(url=auth_options.pages.sign_in, status_code=307)

    user = session.user
    activity = get_user_activity(db, user.id or "")

    context = {
        "request": request,
        "user": user,
        "activity": activity,
        "quick_links": QUICK_LINKS,
        "csrf_token": ensure_csrf_token(request),
        "signout_url": f"{AUTH_BASE_PATH}/signout",
        "signout_callback": auth_options.signout_redirect,
    }
    return templates.TemplateResponse(request, "dashboard.html", context)
