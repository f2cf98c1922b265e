"""Clock and date-formatting helpers.

Timestamps are persisted as naive UTC. Anything shown to a visitor is first
converted into the display zone: ``settings.TZ`` when set, otherwise the
host's local zone.
"""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from ..core.config import settings


def utcnow() -> datetime:
    """Current instant as naive UTC, the representation stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso(ts: str) -> datetime | None:
    """Parse an ISO-8601 string. Returns None if ts is falsy or unparseable."""
    if not ts:
        return None
    try:
        return datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return None


def to_local(value: datetime | str | None, tz: str | None = None) -> datetime | None:
    """Convert a stored timestamp into the display time zone.

    Naive values are taken to be UTC.
    """
    if isinstance(value, str):
        value = parse_iso(value)
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    zone = tz or settings.TZ
    return value.astimezone(ZoneInfo(zone)) if zone else value.astimezone()


def format_locale_date(value: datetime | str | None, fmt: str | None = None) -> str:
    """Render the date part the way an en-US browser's ``toLocaleDateString`` does (M/D/YYYY)."""
    dt = to_local(value)
    if dt is None:
        return ""
    fmt = fmt if fmt is not None else settings.DATE_FORMAT
    if fmt:
        return dt.strftime(fmt)
    return f"{dt.month}/{dt.day}/{dt.year}"
