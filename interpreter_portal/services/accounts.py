"""
Account use cases outside the interpreter sign-in: password login for
admins / clients, interpreter provisioning and credential re-issue,
password changes, and the first-admin seed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from interpreter_portal.core.config import settings
from interpreter_portal.core.exceptions import (AccountExists, InactiveAccount,
                                               InvalidCredentials, NotFound)
from interpreter_portal.core.security import (create_session_token,
                                              generate_login_token,
                                              generate_temp_password,
                                              get_password_hash,
                                              verify_password)
from interpreter_portal.models.interpreter import (InterpreterCredential,
                                                   InterpreterProfile,
                                                   InterpreterStatus)
from interpreter_portal.models.user import User, UserRole
from interpreter_portal.schemas.interpreter import InterpreterCreate
from interpreter_portal.services.interpreter_auth import session_claims

logger = logging.getLogger(__name__)


@dataclass
class OneTimeCredentials:
    temp_password: str
    login_token: str
    token_expiry: datetime


@dataclass
class ProvisionResult:
    user: User
    profile: InterpreterProfile
    credentials: OneTimeCredentials


def generate_interpreter_credentials(now: datetime | None = None) -> OneTimeCredentials:
    now = now or datetime.now(timezone.utc)
    return OneTimeCredentials(
        temp_password=generate_temp_password(settings.TEMP_PASSWORD_LENGTH),
        login_token=generate_login_token(),
        token_expiry=now + timedelta(hours=settings.LOGIN_TOKEN_TTL_HOURS),
    )


# ── Password login ──────────────────────────────────────────────────
async def login_with_password(db: AsyncSession, email: str, password: str) -> tuple[User, str]:
    """Authenticate any account holding a permanent password."""
    result = await db.execute(
        select(User).where(User.email == email).options(selectinload(User.interpreter_profile))
    )
    user = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.hashed_password):
        raise InvalidCredentials(f"Password login rejected for {email}")
    if not user.is_active:
        raise InactiveAccount()

    token = create_session_token(session_claims(user, user.interpreter_profile))
    logger.info("User logged in: %s (%s)", user.email, UserRole(user.role).value)
    return user, token


# ── Interpreter provisioning ────────────────────────────────────────
async def provision_interpreter(db: AsyncSession, body: InterpreterCreate) -> ProvisionResult:
    """Create user, profile and first-login credentials in one transaction."""
    existing = await db.execute(select(User.id).where(User.email == body.email))
    if existing.scalar_one_or_none() is not None:
        raise AccountExists()

    issued = generate_interpreter_credentials()

    user = User(
        email=body.email,
        name=f"{body.first_name} {body.last_name}",
        role=UserRole.INTERPRETER,
    )
    profile = InterpreterProfile(
        user=user,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
        bio=body.bio,
        status=InterpreterStatus.APPROVED if body.auto_approve else InterpreterStatus.PENDING,
        is_verified=body.auto_approve,
        languages=list(body.languages),
        specializations=[s.value for s in body.specializations],
    )
    profile.credentials = InterpreterCredential(
        temp_password=get_password_hash(issued.temp_password),
        login_token=issued.login_token,
        token_expiry=issued.token_expiry,
        is_first_login=True,
    )
    db.add(user)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("Interpreter provisioned: %s (profile %s)", user.email, profile.id)
    return ProvisionResult(user=user, profile=profile, credentials=issued)


async def reissue_credentials(db: AsyncSession, profile_id: int) -> ProvisionResult:
    """Replace the one-time credentials and put the account back on first login."""
    result = await db.execute(
        select(InterpreterProfile)
        .where(InterpreterProfile.id == profile_id)
        .options(
            selectinload(InterpreterProfile.user),
            selectinload(InterpreterProfile.credentials),
        )
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFound("Interpreter not found")

    issued = generate_interpreter_credentials()
    credential = profile.credentials
    if credential is None:
        credential = InterpreterCredential()
        profile.credentials = credential
    credential.temp_password = get_password_hash(issued.temp_password)
    credential.login_token = issued.login_token
    credential.token_expiry = issued.token_expiry
    credential.is_first_login = True

    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info("One-time credentials re-issued for interpreter profile %s", profile.id)
    return ProvisionResult(user=profile.user, profile=profile, credentials=issued)


# ── Password change ─────────────────────────────────────────────────
async def change_interpreter_password(
    db: AsyncSession,
    user: User,
    current_password: str,
    new_password: str,
) -> None:
    if not user.hashed_password:
        raise NotFound("User not found or no password set")
    if not verify_password(current_password, user.hashed_password):
        raise InvalidCredentials("Current password is incorrect")

    result = await db.execute(
        select(InterpreterCredential)
        .join(InterpreterProfile)
        .where(InterpreterProfile.user_id == user.id)
    )
    credential = result.scalar_one_or_none()

    user.hashed_password = get_password_hash(new_password)
    if credential is not None:
        credential.last_login_at = datetime.now(timezone.utc)
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Password changed for interpreter %s", user.email)


# ── Startup seed ────────────────────────────────────────────────────
async def ensure_first_admin(db: AsyncSession) -> bool:
    """Seed the configured admin on first run. Returns True when created."""
    email = settings.FIRST_ADMIN_EMAIL.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        return False
    db.add(
        User(
            email=email,
            hashed_password=get_password_hash(settings.FIRST_ADMIN_PASSWORD),
            name="System Administrator",
            role=UserRole.ADMIN,
        )
    )
    await db.commit()
    logger.info("Default admin created: %s (password: <redacted>)", email)
    return True
