"""Tests for the protected-path guard."""

from datetime import datetime, timedelta, timezone

import pytest
from starlette.requests import Request

from portal.core.auth import SESSION_TOKEN_KEY, read_session_token
from portal.core.security import encode_session_token
from portal.crud.users import create_user
from portal.middlewares import access_redirect, path_is_protected

PREFIXES = ["/dashboard"]


@pytest.mark.parametrize(
    "path",
    ["/dashboard", "/dashboard/", "/dashboard/settings", "/dashboard/a/b"],
)
def test_protected_paths_without_token_redirect(path):
    target = access_redirect(path, None, PREFIXES, "/signin")

    assert target is not None
    assert target.startswith("/signin?callbackUrl=")


@pytest.mark.parametrize("path", ["/", "/signin", "/dashboardx", "/api/auth/session", "/blogs"])
def test_unprotected_paths_pass_through(path):
    assert access_redirect(path, None, PREFIXES, "/signin") is None
    assert not path_is_protected(path, PREFIXES)


def test_any_token_passes_protected_path():
    assert access_redirect("/dashboard", object(), PREFIXES, "/signin") is None


def test_redirect_carries_original_path():
    assert access_redirect("/dashboard/profile", None, PREFIXES, "/signin") == "/signin?callbackUrl=%2Fdashboard%2Fprofile"


def _request_with_session(session: dict) -> Request:
    return Request({"type": "http", "method": "GET", "path": "/", "headers": [], "session": session})


def test_read_session_token_rejects_garbage():
    assert read_session_token(_request_with_session({SESSION_TOKEN_KEY: "not-a-jwt"})) is None


def test_read_session_token_rejects_expired_token():
    token = encode_session_token(subject="u1", expires=datetime.now(timezone.utc) - timedelta(minutes=1))

    assert read_session_token(_request_with_session({SESSION_TOKEN_KEY: token})) is None


def test_read_session_token_without_session_middleware():
    request = Request({"type": "http", "method": "GET", "path": "/", "headers": []})

    assert read_session_token(request) is None


def test_read_session_token_accepts_valid_token():
    token = encode_session_token(subject="u1", expires=datetime.now(timezone.utc) + timedelta(hours=1))

    payload = read_session_token(_request_with_session({SESSION_TOKEN_KEY: token}))

    assert payload is not None and payload.sub == "u1"


def test_middleware_redirects_anonymous_dashboard_request(client):
    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"] == "/signin?callbackUrl=%2Fdashboard"


def test_middleware_guards_nested_paths(client):
    response = client.get("/dashboard/billing", follow_redirects=False)

    assert response.status_code == 307
    assert response.headers["location"].startswith("/signin")


def test_middleware_ignores_lookalike_prefix(client):
    response = client.get("/dashboardx", follow_redirects=False)

    assert response.status_code == 404


def test_middleware_lets_signed_in_user_through(client, db_session, sign_in):
    create_user(db_session, email="ada@example.com", password="correct horse")
    sign_in("ada@example.com", "correct horse")

    response = client.get("/dashboard/billing", follow_redirects=False)

    # Past the guard; no such page exists.
    assert response.status_code == 404
