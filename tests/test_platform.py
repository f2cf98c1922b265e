"""Tests for configuration, migrations and the cross-cutting middleware."""

import json
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from portal.core.config import AppSettings
from portal.core.logging import JsonLogFormatter
from portal.middlewares.request_id import principal_ctx_var, request_id_ctx_var
from portal.crud.sessions import create_session, purge_expired_sessions
from portal.crud.users import create_user
from portal.db.migrate import _column_names, run_migrations
from portal.services.timecalc import utcnow


def test_protected_prefixes_from_comma_string(monkeypatch):
    monkeypatch.setenv("PROTECTED_PREFIXES", "/dashboard, account/ ,")

    settings = AppSettings()

    assert settings.PROTECTED_PREFIXES == ["/dashboard", "/account"]


def test_protected_prefixes_default(monkeypatch):
    monkeypatch.delenv("PROTECTED_PREFIXES", raising=False)

    assert AppSettings(_env_file=None).PROTECTED_PREFIXES == ["/dashboard"]


def test_migrations_upgrade_legacy_schema():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE users (id TEXT PRIMARY KEY, name TEXT, email TEXT)"))
        conn.execute(
            text("CREATE TABLE sessions (id INTEGER PRIMARY KEY, session_token TEXT, user_id TEXT, expires DATETIME)")
        )

    run_migrations(engine)
    run_migrations(engine)

    assert {"image", "email_verified", "password_hash"} <= _column_names(engine, "users")
    with engine.connect() as conn:
        indexes = {row[1] for row in conn.execute(text("PRAGMA index_list(sessions)"))}
    assert "ix_sessions_user_expires" in indexes


def test_migrations_skip_missing_tables():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)

    run_migrations(engine)

    assert _column_names(engine, "users") == set()


def test_purge_expired_sessions(db_session):
    user = create_user(db_session, email="ada@example.com")
    now = utcnow()
    create_session(db_session, user.id, max_age_seconds=60, now=now)
    create_session(db_session, user.id, max_age_seconds=-60, now=now)

    removed = purge_expired_sessions(db_session, now=now)

    assert removed == 1


def test_json_log_formatter_includes_extra_data():
    record = logging.LogRecord("portal.test", logging.INFO, __file__, 1, "activity.lookup_failed", None, None)
    record.extra_data = {"user_id": "u1"}

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["message"] == "activity.lookup_failed"
    assert payload["user_id"] == "u1"
    assert payload["level"] == "INFO"


def test_json_log_formatter_attaches_request_context():
    record = logging.LogRecord("portal.auth", logging.INFO, __file__, 1, "auth.signin", None, None)
    request_token = request_id_ctx_var.set("req-9")
    principal_token = principal_ctx_var.set("user:abc")
    try:
        payload = json.loads(JsonLogFormatter().format(record))
    finally:
        request_id_ctx_var.reset(request_token)
        principal_ctx_var.reset(principal_token)

    assert payload["request_id"] == "req-9"
    assert payload["principal"] == "user:abc"
    assert payload["timestamp"].endswith("Z")


def test_health_and_headers(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.json() == {"ok": True}
    assert response.headers["X-Request-ID"] == "req-123"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert "X-Response-Time" in response.headers


def test_metrics_endpoint_exposed(client):
    response = client.get("/metrics")

    assert response.status_code == 200
