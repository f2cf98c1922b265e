"""CRUD helpers for portal members."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from ..core.security import hash_password
from ..models.session import UserSession
from ..models.user import User


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def get_user(db: Session, user_id: str) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    normalized = normalize_email(email)
    if not normalized:
        return None
    stmt = select(User).where(func.lower(User.email) == normalized)
    return db.execute(stmt).scalars().first()


def get_user_with_latest_session(db: Session, user_id: str) -> tuple[User | None, UserSession | None]:
    """Return the user and, when one exists, its session with the greatest ``expires``."""

    user = get_user(db, user_id)
    if user is None:
        return None, None
    stmt = (
        select(UserSession)
        .where(UserSession.user_id == user.id)
        .order_by(desc(UserSession.expires))
        .limit(1)
    )
    latest = db.execute(stmt).scalars().first()
    return user, latest


def create_user(
    db: Session,
    *,
    email: str,
    password: str | None = None,
    name: str | None = None,
    image: str | None = None,
    email_verified: datetime | None = None,
) -> User:
    normalized = normalize_email(email)
    if not normalized:
        raise ValueError("email is required")
    if get_user_by_email(db, normalized) is not None:
        raise ValueError(f"a user with email {normalized} already exists")
    user = User(
        email=normalized,
        name=(name or "").strip() or None,
        image=(image or "").strip() or None,
        email_verified=email_verified,
        password_hash=hash_password(password) if password else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
