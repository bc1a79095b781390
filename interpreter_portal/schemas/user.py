"""Pydantic schemas for users and interpreter profiles as echoed to clients."""

from __future__ import annotations

from interpreter_portal.models.interpreter import (InterpreterProfile,
                                                   InterpreterStatus)
from interpreter_portal.models.user import UserRole
from interpreter_portal.schemas.common import CamelModel


class UserSummary(CamelModel):
    id: int
    email: str
    name: str | None
    role: UserRole


class InterpreterSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    status: InterpreterStatus
    is_verified: bool


class InterpreterDetail(InterpreterSummary):
    email: str
    phone: str | None = None
    bio: str | None = None
    languages: list[str]
    specializations: list[str]


class CredentialPresence(CamelModel):
    """Which one-time credentials are still outstanding — never their values."""

    has_temp_password: bool
    has_login_token: bool
    is_first_login: bool


def interpreter_detail(profile: InterpreterProfile, email: str) -> InterpreterDetail:
    return InterpreterDetail(
        id=profile.id,
        email=email,
        first_name=profile.first_name,
        last_name=profile.last_name,
        status=profile.status,
        is_verified=bool(profile.is_verified),
        phone=profile.phone,
        bio=profile.bio,
        languages=list(profile.languages or []),
        specializations=list(profile.specializations or []),
    )
