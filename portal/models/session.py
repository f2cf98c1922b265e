"""SQLAlchemy model for persisted sign-in sessions."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import relationship

from ..db.session import Base


class UserSession(Base):
    """One sign-in. Active while ``expires`` is strictly in the future."""

    __tablename__ = "sessions"
    __table_args__ = (Index("ix_sessions_user_expires", "user_id", "expires"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_token = Column(Text, nullable=False, unique=True, index=True)
    user_id = Column(Text, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    expires = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="sessions")

    def __repr__(self) -> str:
        return f"<UserSession(id={self.id}, user_id={self.user_id}, expires={self.expires})>"


__all__ = ["UserSession"]
