"""CRUD helpers for persisted sign-in sessions."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from ..core.security import new_session_token
from ..models.session import UserSession
from ..services.timecalc import utcnow


def create_session(db: Session, user_id: str, max_age_seconds: int, now: datetime | None = None) -> UserSession:
    now = now or utcnow()
    record = UserSession(
        session_token=new_session_token(),
        user_id=user_id,
        expires=now + timedelta(seconds=max_age_seconds),
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def count_active_sessions(db: Session, user_id: str, now: datetime | None = None) -> int:
    """Sessions for ``user_id`` expiring strictly after ``now``."""

    now = now or utcnow()
    stmt = (
        select(func.count())
        .select_from(UserSession)
        .where(UserSession.user_id == user_id, UserSession.expires > now)
    )
    return int(db.scalar(stmt) or 0)


def delete_session_by_token(db: Session, session_token: str) -> bool:
    result = db.execute(delete(UserSession).where(UserSession.session_token == session_token))
    db.commit()
    return bool(result.rowcount)


def purge_expired_sessions(db: Session, now: datetime | None = None) -> int:
    now = now or utcnow()
    result = db.execute(delete(UserSession).where(UserSession.expires <= now))
    db.commit()
    return int(result.rowcount or 0)
