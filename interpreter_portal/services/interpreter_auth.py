"""
Interpreter sign-in: one-time token or password, optional first-login
password rotation, then a signed session credential.

Every rejection raises an ``AuthenticationError`` subclass before anything
is written, so a failed attempt never touches the credential row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from interpreter_portal.core.exceptions import (AccountNotFound,
                                               CredentialsMissing,
                                               InactiveAccount,
                                               InvalidCredentials,
                                               InvalidToken)
from interpreter_portal.core.security import (create_session_token,
                                              get_password_hash,
                                              login_token_matches,
                                              verify_password)
from interpreter_portal.models.interpreter import (InterpreterCredential,
                                                   InterpreterProfile)
from interpreter_portal.models.user import User, UserRole

logger = logging.getLogger(__name__)


@dataclass
class SignInResult:
    user: User
    profile: InterpreterProfile
    session_token: str
    require_password_change: bool
    rotated: bool


def as_utc(dt: datetime | None) -> datetime | None:
    """Stores without timezone support hand back naive datetimes; treat them as UTC."""
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def session_claims(user: User, profile: InterpreterProfile | None = None) -> dict:
    claims = {
        "user_id": user.id,
        "email": user.email,
        "role": UserRole(user.role).value,
    }
    if profile is not None:
        claims["interpreter_profile_id"] = profile.id
    return claims


async def load_interpreter(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(
        select(User)
        .where(User.email == email, User.role == UserRole.INTERPRETER)
        .options(
            selectinload(User.interpreter_profile).selectinload(InterpreterProfile.credentials)
        )
    )
    return result.scalar_one_or_none()


def _check_login_token(credential: InterpreterCredential, token: str, now: datetime) -> None:
    if not login_token_matches(token, credential.login_token):
        raise InvalidToken("Login token does not match")
    expiry = as_utc(credential.token_expiry)
    if expiry is not None and now > expiry:
        raise InvalidToken("Login token has expired")


def _check_password(user: User, credential: InterpreterCredential, password: str) -> None:
    if credential.temp_password and verify_password(password, credential.temp_password):
        return
    if user.hashed_password and verify_password(password, user.hashed_password):
        return
    raise InvalidCredentials("Password matched neither temporary nor permanent hash")


async def sign_in_interpreter(
    db: AsyncSession,
    email: str,
    *,
    password: str | None = None,
    token: str | None = None,
    new_password: str | None = None,
    now: datetime | None = None,
) -> SignInResult:
    """Authenticate an interpreter and issue a session credential.

    A supplied *token* takes precedence over *password*. *new_password* is
    only honoured while the account is still on its first login; it becomes
    the permanent password and retires the one-time credentials.
    """
    now = now or datetime.now(timezone.utc)

    user = await load_interpreter(db, email)
    if user is None or user.interpreter_profile is None:
        raise AccountNotFound(f"No interpreter account for {email}")

    profile = user.interpreter_profile
    credential = profile.credentials
    if credential is None:
        logger.error("Interpreter profile %s has no credential record", profile.id)
        raise CredentialsMissing(f"Profile {profile.id} has no credentials")

    if token:
        _check_login_token(credential, token, now)
    elif password:
        _check_password(user, credential, password)
    else:
        raise InvalidCredentials("Neither token nor password supplied")

    if not user.is_active:
        logger.warning("Sign-in refused for inactive interpreter %s", user.email)
        raise InactiveAccount()

    first_login = bool(credential.is_first_login)
    rotated = first_login and bool(new_password)

    try:
        if rotated:
            user.hashed_password = get_password_hash(new_password)  # type: ignore[arg-type]
            credential.temp_password = None
            credential.login_token = None
            credential.token_expiry = None
            credential.is_first_login = False
        credential.last_login_at = now
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    session_token = create_session_token(session_claims(user, profile))
    logger.info("Interpreter signed in: %s (rotated=%s)", user.email, rotated)

    return SignInResult(
        user=user,
        profile=profile,
        session_token=session_token,
        require_password_change=first_login and not new_password,
        rotated=rotated,
    )
