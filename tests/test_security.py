from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from portal.core.auth import safe_callback_url
from portal.core.security import (
    csrf_matches,
    decode_session_token,
    encode_session_token,
    hash_password,
    verify_password,
)


def _in(minutes: int) -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)


def test_session_token_round_trip():
    token = encode_session_token(
        subject="user-1",
        expires=_in(30),
        session_id="sid-1",
        name="Ada",
        email="ada@example.com",
    )

    payload = decode_session_token(token)

    assert payload.sub == "user-1"
    assert payload.sid == "sid-1"
    assert payload.name == "Ada"
    assert payload.picture is None


def test_naive_expiry_is_treated_as_utc():
    expires = (datetime.now(timezone.utc) + timedelta(hours=1)).replace(tzinfo=None, microsecond=0)

    payload = decode_session_token(encode_session_token(subject="u", expires=expires))

    assert payload.exp.replace(tzinfo=None) == expires


def test_expired_token_is_rejected():
    token = encode_session_token(subject="user-1", expires=_in(-1))

    with pytest.raises(ValueError):
        decode_session_token(token)


def test_token_signed_with_other_secret_is_rejected():
    forged = jwt.encode(
        {"sub": "admin", "exp": int(_in(30).timestamp()), "iat": 0, "aud": "member-portal", "iss": "member-portal"},
        "not-the-secret",
        algorithm="HS256",
    )

    with pytest.raises(ValueError):
        decode_session_token(forged)


def test_password_hashing():
    hashed = hash_password("correct horse")

    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password("correct horse", None)
    assert not verify_password("correct horse", "not-a-bcrypt-hash")


def test_csrf_matches():
    assert csrf_matches("abc", "abc")
    assert not csrf_matches("abc", "abd")
    assert not csrf_matches(None, "abc")
    assert not csrf_matches("abc", "")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("/dashboard", "/dashboard"),
        ("/dashboard?tab=1", "/dashboard?tab=1"),
        ("http://testserver/dashboard", "/dashboard"),
        ("https://evil.example/", "/"),
        ("//evil.example", "/"),
        ("/\\evil.example", "/"),
        ("dashboard", "/"),
        ("", "/"),
        (None, "/"),
    ],
)
def test_safe_callback_url(value, expected):
    assert safe_callback_url(value, base_url="http://testserver/") == expected
