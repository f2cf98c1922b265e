"""Idempotent SQLite schema upgrades.

``Base.metadata.create_all`` builds fresh databases. Databases created by an
older release, or by an identity adapter that only knows the bare
users/sessions columns, get the missing pieces added here. Nothing is dropped.
"""

from __future__ import annotations

from typing import Iterable

from sqlalchemy import text
from sqlalchemy.engine import Engine


def _table_columns(engine: Engine, table: str) -> list[dict[str, object]]:
    with engine.connect() as conn:
        return [dict(row) for row in conn.execute(text(f"PRAGMA table_info({table})")).mappings().all()]


def _column_names(engine: Engine, table: str) -> set[str]:
    return {str(record["name"]) for record in _table_columns(engine, table)}


def _add_column_sqlite(engine: Engine, table: str, col_def: str) -> None:
    with engine.begin() as conn:
        conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {col_def}"))


def _create_index_if_not_exists(engine: Engine, table: str, name: str, cols: Iterable[str], unique: bool = False) -> None:
    cols_sql = ", ".join(cols)
    unique_sql = "UNIQUE " if unique else ""
    with engine.begin() as conn:
        conn.execute(text(f"CREATE {unique_sql}INDEX IF NOT EXISTS {name} ON {table} ({cols_sql})"))


def run_migrations(engine: Engine) -> None:
    """Bring an existing SQLite schema up to what the models expect."""

    if engine.dialect.name != "sqlite":
        return

    user_needed: dict[str, str] = {
        "image": "TEXT",
        "email_verified": "DATETIME",
        "password_hash": "TEXT",
    }
    ucols = _column_names(engine, "users")
    if ucols:
        for name, dtype in user_needed.items():
            if name not in ucols:
                _add_column_sqlite(engine, "users", f"{name} {dtype}")
        _create_index_if_not_exists(engine, "users", "ix_users_email", ["email"], unique=True)

    if _column_names(engine, "sessions"):
        _create_index_if_not_exists(engine, "sessions", "ix_sessions_user_expires", ["user_id", "expires"])
        _create_index_if_not_exists(engine, "sessions", "ix_sessions_session_token", ["session_token"], unique=True)
