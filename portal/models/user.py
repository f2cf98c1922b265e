"""SQLAlchemy model for portal members."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


def _new_user_id() -> str:
    return uuid4().hex


class User(Base):
    """A member who can sign in. Only credentials users carry a password hash."""

    __tablename__ = "users"

    id = Column(Text, primary_key=True, default=_new_user_id)
    name = Column(Text, nullable=True)
    email = Column(Text, nullable=True, unique=True, index=True)
    email_verified = Column(DateTime, nullable=True)
    image = Column(Text, nullable=True)
    password_hash = Column(Text, nullable=True)

    sessions = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


__all__ = ["User"]
