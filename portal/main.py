"""Application wiring for the member portal.

Configuration, logging, database setup, middleware, static assets,
routers and error handlers are all assembled here into one ``app``.

Middleware order matters. Starlette runs the last-added middleware first, so
requests flow RequestId -> SecurityHeaders -> Session -> AccessGuard -> routes.
The guard needs the decoded cookie session and therefore sits innermost.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from prometheus_fastapi_instrumentator import Instrumentator
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from . import models as _models  # noqa: F401
from .core.auth import AUTH_BASE_PATH, read_session_token
from .core.config import settings
from .core.errors import http_exception_handler, validation_exception_handler
from .core.logging import configure_logging
from .db.migrate import run_migrations
from .db.session import Base, engine
from .middlewares import AccessGuardMiddleware, RequestIdMiddleware, SecurityHeadersMiddleware
from .routers import api_activity, auth, auth_ui, dashboard, site

configure_logging(settings.LOG_LEVEL)

# ``create_all`` builds a fresh database; ``run_migrations`` upgrades an existing one.
Base.metadata.create_all(bind=engine)
run_migrations(engine)

app = FastAPI(title=settings.APP_NAME)
app.mount("/static", StaticFiles(directory=str(settings.static_dir)), name="static")

app.add_middleware(
    AccessGuardMiddleware,
    token_reader=read_session_token,
    protected_prefixes=settings.PROTECTED_PREFIXES,
    signin_path=settings.SIGNIN_PATH,
)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.APP_SECRET,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE,
    same_site="lax",
    https_only=settings.SESSION_HTTPS_ONLY,
)
app.add_middleware(
    SecurityHeadersMiddleware,
    hsts=settings.SESSION_HTTPS_ONLY,
    no_store_prefixes=tuple(settings.PROTECTED_PREFIXES) + (AUTH_BASE_PATH,),
)
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

app.include_router(site.router)
app.include_router(auth_ui.router)
app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(api_activity.router)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}


Instrumentator().instrument(app).expose(app, include_in_schema=False)

__all__ = ["app"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
