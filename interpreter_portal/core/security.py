"""
Password hashing (bcrypt), one-time credential generation and
session credential (JWT) signing / verification.
"""

from __future__ import annotations

import re
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from interpreter_portal.core.config import settings
from interpreter_portal.core.exceptions import InvalidOrExpiredSessionCredential

BCRYPT_ROUNDS = 12

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)

_LOWER = string.ascii_lowercase
_UPPER = string.ascii_uppercase
_DIGITS = string.digits
_SYMBOLS = "!@#$%^&*"
_ALPHABET = _LOWER + _UPPER + _DIGITS + _SYMBOLS

# Claims added by the signer; stripped again on verification.
_REGISTERED_CLAIMS = ("exp", "iat")

_TTL_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_TTL_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


# ── Passwords ───────────────────────────────────────────────────────
def verify_password(plain: str, hashed: str | None) -> bool:
    """Check *plain* against a bcrypt hash. Malformed or empty hashes never match."""
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def get_password_hash(plain: str) -> str:
    return pwd_context.hash(plain)


def generate_temp_password(length: int = 12) -> str:
    """Random password with at least one lower, upper, digit and symbol.

    The four guaranteed characters are placed first and the whole string is
    shuffled with the system CSPRNG, so their positions are not predictable.
    """
    if length < 4:
        raise ValueError("Temporary passwords need at least 4 characters")
    rng = secrets.SystemRandom()
    chars = [
        secrets.choice(_LOWER),
        secrets.choice(_UPPER),
        secrets.choice(_DIGITS),
        secrets.choice(_SYMBOLS),
    ]
    chars.extend(secrets.choice(_ALPHABET) for _ in range(length - 4))
    rng.shuffle(chars)
    return "".join(chars)


def generate_login_token() -> str:
    """256 bits of randomness, hex encoded."""
    return secrets.token_hex(32)


def login_token_matches(provided: str, stored: str | None) -> bool:
    if not stored:
        return False
    return secrets.compare_digest(provided.encode("utf-8"), stored.encode("utf-8"))


# ── Session credentials (JWT) ───────────────────────────────────────
def parse_ttl(ttl: str | int | timedelta) -> timedelta:
    """Accept ``timedelta``, seconds, or shorthand such as ``"7d"`` / ``"12h"``."""
    if isinstance(ttl, timedelta):
        return ttl
    if isinstance(ttl, int):
        return timedelta(seconds=ttl)
    match = _TTL_RE.match(ttl)
    if match is None:
        raise ValueError(f"Unrecognised TTL: {ttl!r}")
    amount, unit = match.groups()
    return timedelta(**{_TTL_UNITS[unit]: int(amount)})


def create_session_token(
    payload: dict[str, Any],
    ttl: str | int | timedelta | None = None,
) -> str:
    """Sign *payload* with the server secret; expiry defaults to ``SESSION_TOKEN_TTL``."""
    now = datetime.now(timezone.utc)
    expire = now + parse_ttl(ttl if ttl is not None else settings.SESSION_TOKEN_TTL)
    claims = {k: v for k, v in payload.items() if k not in _REGISTERED_CLAIMS}
    claims.update({"iat": now, "exp": expire})
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_session_token(token: str) -> dict[str, Any]:
    """Return the original payload, or raise ``InvalidOrExpiredSessionCredential``."""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as exc:
        raise InvalidOrExpiredSessionCredential(str(exc)) from exc
    if "exp" not in claims:
        raise InvalidOrExpiredSessionCredential("Token carries no expiry")
    return {k: v for k, v in claims.items() if k not in _REGISTERED_CLAIMS}
