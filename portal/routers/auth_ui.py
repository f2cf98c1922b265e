from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..core.auth import AUTH_BASE_PATH, auth_options, ensure_csrf_token, safe_callback_url
from ..core.jinja import get_templates
from ..deps.auth import get_server_session
from ..schemas.auth import ServerSession

router = APIRouter()
templates = get_templates()

SIGNIN_ERRORS = {
    "CredentialsSignin": "Invalid email or password",
}


@router.get(auth_options.pages.sign_in, response_class=HTMLResponse)
def signin_page(
    request: Request,
    callbackUrl: str = "/dashboard",
    error: str = "",
    session: ServerSession | None = Depends(get_server_session),
):
    callback_url = safe_callback_url(callbackUrl, default="/dashboard", base_url=str(request.base_url))
    if session is not None:
        return RedirectResponse(url=callback_url, status_code=302)
    context = {
        "request": request,
        "csrf_token": ensure_csrf_token(request),
        "callback_url": callback_url,
        "action_url": f"{AUTH_BASE_PATH}/callback/credentials",
        "error": SIGNIN_ERRORS.get(error, "Unable to sign in" if error else ""),
    }
    return templates.TemplateResponse(request, "signin.html", context)
