"""Per-render activity summary shown on the member dashboard."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from ..crud.sessions import count_active_sessions
from ..crud.users import get_user_with_latest_session
from ..schemas.activity import UserActivity
from .timecalc import format_locale_date, utcnow

logger = logging.getLogger("portal.activity")

LAST_LOGIN_NEVER = "Never"
LAST_LOGIN_UNAVAILABLE = "Unavailable"
# Sessions are issued for 30 days, so the latest expiry minus 30 days
# approximates when that sign-in happened. No login timestamp is persisted.
LAST_LOGIN_OFFSET = timedelta(days=30)


def get_user_activity(db: Session, user_id: str, now: datetime | None = None) -> UserActivity:
    """Summarise ``user_id``'s sign-in history for display.

    Both reads succeed or the whole summary falls back to placeholders; a
    failure is logged and never raised to the caller.
    """

    now = now or utcnow()
    try:
        user, latest_session = get_user_with_latest_session(db, user_id)
        active_sessions = count_active_sessions(db, user_id, now=now)
    except Exception:
        db.rollback()
        logger.exception(
            "activity.lookup_failed",
            extra={"extra_data": {"user_id": user_id}},
        )
        return UserActivity(
            last_login=LAST_LOGIN_UNAVAILABLE,
            member_since=format_locale_date(now),
            active_sessions=0,
        )

    if latest_session is not None:
        last_login = format_locale_date(latest_session.expires - LAST_LOGIN_OFFSET)
    else:
        last_login = LAST_LOGIN_NEVER

    if user is not None and user.email_verified:
        member_since = format_locale_date(user.email_verified)
    else:
        member_since = format_locale_date(now)

    return UserActivity(
        last_login=last_login,
        member_since=member_since,
        active_sessions=active_sessions,
    )
