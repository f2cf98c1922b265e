from __future__ import annotations

import hmac
import secrets
from datetime import datetime, timezone
from typing import Any

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel, ValidationError

from .config import settings

ALGORITHM = "HS256"
AUDIENCE = "member-portal"
ISSUER = "member-portal"


class TokenPayload(BaseModel):
    """Claims carried by the session token stored in the cookie session."""

    sub: str
    sid: str | None = None
    name: str | None = None
    email: str | None = None
    picture: str | None = None
    exp: datetime
    iat: datetime
    aud: str
    iss: str


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def encode_session_token(
    *,
    subject: str,
    expires: datetime,
    session_id: str | None = None,
    name: str | None = None,
    email: str | None = None,
    picture: str | None = None,
) -> str:
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=timezone.utc)
    payload: dict[str, Any] = {
        "sub": subject,
        "iat": int(_now().timestamp()),
        "exp": int(expires.timestamp()),
        "aud": AUDIENCE,
        "iss": ISSUER,
    }
    for claim, value in (("sid", session_id), ("name", name), ("email", email), ("picture", picture)):
        if value:
            payload[claim] = value
    return jwt.encode(payload, settings.AUTH_SECRET, algorithm=ALGORITHM)


def decode_session_token(token: str) -> TokenPayload:
    try:
        decoded = jwt.decode(
            token,
            settings.AUTH_SECRET,
            algorithms=[ALGORITHM],
            audience=AUDIENCE,
            issuer=ISSUER,
        )
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    try:
        return TokenPayload.model_validate(decoded)
    except ValidationError as exc:
        raise ValueError("Invalid token payload") from exc


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash in the database.
        return False


def new_csrf_token() -> str:
    return secrets.token_urlsafe(32)


def csrf_matches(expected: str | None, provided: str | None) -> bool:
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected, provided)


def new_session_token() -> str:
    return secrets.token_urlsafe(32)
