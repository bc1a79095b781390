"""Tests for password hashing, one-time credential generation and session credentials."""

import string
from datetime import timedelta

import pytest
from jose import jwt

from interpreter_portal.core.config import settings
from interpreter_portal.core.exceptions import InvalidOrExpiredSessionCredential
from interpreter_portal.core.security import (create_session_token,
                                              generate_login_token,
                                              generate_temp_password,
                                              get_password_hash,
                                              login_token_matches, parse_ttl,
                                              verify_password,
                                              verify_session_token)

SYMBOLS = set("!@#$%^&*")


@pytest.mark.parametrize("length", [4, 5, 8, 12, 32])
def test_temp_password_composition(length: int):
    """Every generated password holds a lower, upper, digit and symbol."""
    for _ in range(200):
        pw = generate_temp_password(length)
        assert len(pw) == length
        assert any(c in string.ascii_lowercase for c in pw)
        assert any(c in string.ascii_uppercase for c in pw)
        assert any(c in string.digits for c in pw)
        assert any(c in SYMBOLS for c in pw)


def test_temp_password_default_length_and_alphabet():
    pw = generate_temp_password()
    allowed = set(string.ascii_letters + string.digits) | SYMBOLS
    assert len(pw) == 12
    assert set(pw) <= allowed


def test_temp_password_too_short_rejected():
    with pytest.raises(ValueError):
        generate_temp_password(3)


def test_login_token_is_256_bit_hex():
    token = generate_login_token()
    assert len(token) == 64
    int(token, 16)  # hex or ValueError
    assert generate_login_token() != token


def test_login_token_matches():
    assert login_token_matches("abc123", "abc123")
    assert not login_token_matches("abc123", "abc124")
    assert not login_token_matches("abc123", None)
    assert not login_token_matches("", "")


def test_hash_and_verify_password():
    hashed = get_password_hash("NewPass1!")
    assert hashed != "NewPass1!"
    assert hashed.startswith("$2b$12$")
    assert verify_password("NewPass1!", hashed)
    assert not verify_password("NewPass1?", hashed)


def test_hash_is_salted():
    assert get_password_hash("same-password") != get_password_hash("same-password")


@pytest.mark.parametrize("bad_hash", [None, "", "not-a-bcrypt-hash"])
def test_verify_password_never_raises_on_bad_hash(bad_hash):
    assert verify_password("whatever", bad_hash) is False


def test_session_token_round_trip():
    payload = {
        "user_id": 7,
        "email": "interp@test.com",
        "role": "INTERPRETER",
        "interpreter_profile_id": 3,
    }
    token = create_session_token(payload)
    assert verify_session_token(token) == payload


def test_session_token_default_ttl_is_seven_days():
    token = create_session_token({"user_id": 1, "role": "CLIENT"})
    claims = jwt.get_unverified_claims(token)
    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600


def test_expired_session_token_rejected():
    token = create_session_token({"user_id": 1, "role": "CLIENT"}, ttl=timedelta(seconds=-5))
    with pytest.raises(InvalidOrExpiredSessionCredential):
        verify_session_token(token)


def test_tampered_session_token_rejected():
    token = create_session_token({"user_id": 1, "role": "CLIENT"})
    header, body, signature = token.split(".")
    forged = jwt.encode({"user_id": 1, "role": "ADMIN"}, "not-the-secret", algorithm="HS256")
    with pytest.raises(InvalidOrExpiredSessionCredential):
        verify_session_token(f"{header}.{forged.split('.')[1]}.{signature}")
    with pytest.raises(InvalidOrExpiredSessionCredential):
        verify_session_token(forged)


@pytest.mark.parametrize("garbage", ["", "abc", "a.b.c", "Bearer x.y.z"])
def test_malformed_session_token_rejected(garbage: str):
    with pytest.raises(InvalidOrExpiredSessionCredential):
        verify_session_token(garbage)


def test_session_token_without_expiry_rejected():
    token = jwt.encode({"user_id": 1, "role": "ADMIN"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(InvalidOrExpiredSessionCredential):
        verify_session_token(token)


@pytest.mark.parametrize(
    "ttl, expected",
    [
        ("7d", timedelta(days=7)),
        ("12h", timedelta(hours=12)),
        ("30m", timedelta(minutes=30)),
        ("45s", timedelta(seconds=45)),
        ("90", timedelta(seconds=90)),
        (60, timedelta(seconds=60)),
        (timedelta(hours=1), timedelta(hours=1)),
    ],
)
def test_parse_ttl(ttl, expected):
    assert parse_ttl(ttl) == expected


def test_parse_ttl_rejects_unknown_unit():
    with pytest.raises(ValueError):
        parse_ttl("3w")
