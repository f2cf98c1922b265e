"""Session provider: credentials sign-in, sign-out and session introspection.

The provider is configured once through ``AuthOptions`` and exposed as a
single ``AuthHandler``. The HTTP layer only forwards ``/api/auth/<action>``
requests to it; every cookie, token and redirect decision is made here.

State kept in the signed cookie session (``request.session``):

* ``session_token``: an HS256 JWT describing the signed-in user.
* ``csrf_token``: double-submit token every state-changing POST must echo.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable
from urllib.parse import urlencode, urlsplit, urlunsplit

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from sqlalchemy.orm import Session

from ..crud.sessions import create_session, delete_session_by_token
from ..crud.users import get_user_by_email
from ..models.user import User
from ..schemas.auth import CsrfResponse, ProviderOut, ServerSession, SessionUser
from .config import AppSettings, settings
from .jinja import get_templates
from .security import (
    TokenPayload,
    csrf_matches,
    decode_session_token,
    encode_session_token,
    new_csrf_token,
    verify_password,
)

logger = logging.getLogger("portal.auth")

SESSION_TOKEN_KEY = "session_token"
CSRF_KEY = "csrf_token"
AUTH_BASE_PATH = "/api/auth"


@dataclass
class CredentialsProvider:
    """Email + password sign-in against ``users.password_hash``."""

    id: str = "credentials"
    name: str = "Credentials"
    type: str = "credentials"

    def authorize(self, db: Session, email: str, password: str) -> User | None:
        if not email or not password:
            return None
        user = get_user_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash):
            return None
        return user


@dataclass
class AuthPages:
    sign_in: str = "/signin"


@dataclass
class AuthOptions:
    session_max_age: int
    signout_redirect: str = "/"
    pages: AuthPages = field(default_factory=AuthPages)
    providers: list[CredentialsProvider] = field(default_factory=lambda: [CredentialsProvider()])

    @classmethod
    def from_settings(cls, app_settings: AppSettings) -> "AuthOptions":
        return cls(
            session_max_age=app_settings.SESSION_MAX_AGE,
            signout_redirect=app_settings.SIGNOUT_REDIRECT,
            pages=AuthPages(sign_in=app_settings.SIGNIN_PATH),
        )

    def provider(self, provider_id: str) -> CredentialsProvider | None:
        for provider in self.providers:
            if provider.id == provider_id:
                return provider
        return None


def read_session_token(request: Request) -> TokenPayload | None:
    """Decode the session token from the cookie session; invalid or expired tokens read as absent."""

    if "session" not in request.scope:
        return None
    raw = request.session.get(SESSION_TOKEN_KEY)
    if not raw:
        return None
    try:
        return decode_session_token(raw)
    except ValueError:
        return None


def session_from_token(payload: TokenPayload) -> ServerSession:
    return ServerSession(
        user=SessionUser(
            id=payload.sub,
            name=payload.name,
            email=payload.email,
            image=payload.picture,
        ),
        expires=payload.exp,
        session_token=payload.sid,
    )


def ensure_csrf_token(request: Request) -> str:
    token = request.session.get(CSRF_KEY)
    if not token:
        token = new_csrf_token()
        request.session[CSRF_KEY] = token
    return token


def safe_callback_url(value: Any, default: str = "/", base_url: str | None = None) -> str:
    """Keep redirects on this site: relative paths pass, same-origin absolute URLs are reduced to their path."""

    if not isinstance(value, str) or not value.strip():
        return default
    value = value.strip()
    parts = urlsplit(value)
    if parts.scheme or parts.netloc:
        if base_url is None:
            return default
        base = urlsplit(base_url)
        if (parts.scheme, parts.netloc) != (base.scheme, base.netloc):
            return default
        value = urlunsplit(("", "", parts.path or "/", parts.query, parts.fragment))
    if not value.startswith("/") or value.startswith("//") or "\\" in value:
        return default
    return value


def signin_url(pages: AuthPages, **params: str) -> str:
    query = urlencode({key: value for key, value in params.items() if value})
    return f"{pages.sign_in}?{query}" if query else pages.sign_in


async def _form_value(request: Request, name: str) -> str:
    form = await request.form()
    value = form.get(name)
    return value if isinstance(value, str) else ""


ActionHandler = Callable[[Request, list[str], Session], Awaitable[Response]]


class AuthHandler:
    """Dispatches ``/api/auth/<action>`` requests for GET and POST."""

    def __init__(self, options: AuthOptions) -> None:
        self.options = options
        self.templates = get_templates()
        self._routes: dict[tuple[str, str], ActionHandler] = {
            ("GET", "csrf"): self._csrf,
            ("GET", "providers"): self._providers,
            ("GET", "session"): self._session,
            ("GET", "signin"): self._signin_page,
            ("POST", "signin"): self._credentials_callback,
            ("POST", "callback"): self._credentials_callback,
            ("GET", "signout"): self._signout_page,
            ("POST", "signout"): self._signout,
        }

    async def __call__(self, request: Request, action: str, db: Session) -> Response:
        segments = [segment for segment in action.split("/") if segment]
        name = segments[0] if segments else ""
        handler = self._routes.get((request.method.upper(), name))
        if handler is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown auth action: {action}")
        return await handler(request, segments[1:], db)

    def _require_csrf(self, request: Request, provided: str) -> None:
        if not csrf_matches(request.session.get(CSRF_KEY), provided):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid CSRF token")

    def _base_url(self, request: Request) -> str:
        return str(request.base_url)

    async def _csrf(self, request: Request, rest: list[str], db: Session) -> Response:
        return JSONResponse(CsrfResponse(csrfToken=ensure_csrf_token(request)).model_dump())

    async def _providers(self, request: Request, rest: list[str], db: Session) -> Response:
        payload = {
            provider.id: ProviderOut(
                id=provider.id,
                name=provider.name,
                type=provider.type,
                signinUrl=f"{AUTH_BASE_PATH}/signin/{provider.id}",
                callbackUrl=f"{AUTH_BASE_PATH}/callback/{provider.id}",
            ).model_dump()
            for provider in self.options.providers
        }
        return JSONResponse(payload)

    async def _session(self, request: Request, rest: list[str], db: Session) -> Response:
        payload = read_session_token(request)
        if payload is None:
            return JSONResponse({})
        return JSONResponse(session_from_token(payload).public_dict())

    async def _signin_page(self, request: Request, rest: list[str], db: Session) -> Response:
        callback_url = safe_callback_url(request.query_params.get("callbackUrl"), base_url=self._base_url(request))
        error = request.query_params.get("error") or ""
        return RedirectResponse(
            url=signin_url(self.options.pages, callbackUrl=callback_url, error=error),
            status_code=status.HTTP_302_FOUND,
        )

    async def _credentials_callback(self, request: Request, rest: list[str], db: Session) -> Response:
        provider_id = rest[0] if rest else ""
        provider = self.options.provider(provider_id)
        if provider is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown provider: {provider_id}")

        self._require_csrf(request, await _form_value(request, "csrfToken"))
        callback_url = safe_callback_url(
            await _form_value(request, "callbackUrl"),
            base_url=self._base_url(request),
        )
        email = (await _form_value(request, "email")).strip()
        password = await _form_value(request, "password")

        user = provider.authorize(db, email, password)
        if user is None:
            logger.info("auth.signin_failed", extra={"extra_data": {"provider": provider.id}})
            return RedirectResponse(
                url=signin_url(self.options.pages, error="CredentialsSignin", callbackUrl=callback_url),
                status_code=status.HTTP_302_FOUND,
            )

        record = create_session(db, user.id, self.options.session_max_age)
        request.session[SESSION_TOKEN_KEY] = encode_session_token(
            subject=user.id,
            expires=record.expires,
            session_id=record.session_token,
            name=user.name,
            email=user.email,
            picture=user.image,
        )
        request.session[CSRF_KEY] = new_csrf_token()
        request.state.principal = f"user:{user.id}"
        logger.info("auth.signin", extra={"extra_data": {"provider": provider.id, "user_id": user.id}})
        return RedirectResponse(url=callback_url, status_code=status.HTTP_302_FOUND)

    async def _signout_page(self, request: Request, rest: list[str], db: Session) -> Response:
        context = {
            "request": request,
            "csrf_token": ensure_csrf_token(request),
            "signout_url": f"{AUTH_BASE_PATH}/signout",
            "signout_callback": safe_callback_url(
                request.query_params.get("callbackUrl"),
                default=self.options.signout_redirect,
                base_url=self._base_url(request),
            ),
        }
        return self.templates.TemplateResponse(request, "signout.html", context)

    async def _signout(self, request: Request, rest: list[str], db: Session) -> Response:
        self._require_csrf(request, await _form_value(request, "csrfToken"))
        callback_url = safe_callback_url(
            await _form_value(request, "callbackUrl"),
            default=self.options.signout_redirect,
            base_url=self._base_url(request),
        )
        payload = read_session_token(request)
        if payload is not None and payload.sid:
            delete_session_by_token(db, payload.sid)
        request.session.pop(SESSION_TOKEN_KEY, None)
        if payload is not None:
            logger.info("auth.signout", extra={"extra_data": {"user_id": payload.sub}})
        return RedirectResponse(url=callback_url, status_code=status.HTTP_302_FOUND)


auth_options = AuthOptions.from_settings(settings)
auth_handler = AuthHandler(auth_options)
