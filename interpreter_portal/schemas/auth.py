"""Pydantic schemas for sign-in, login and password rotation."""

from __future__ import annotations

from pydantic import Field, field_validator

from interpreter_portal.core.config import settings
from interpreter_portal.schemas.common import CamelModel, normalise_email
from interpreter_portal.schemas.user import (CredentialPresence,
                                             InterpreterSummary, UserSummary)


# bcrypt only reads the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72


def _check_new_password(v: str | None) -> str | None:
    if v is None:
        return v
    if len(v) < settings.MIN_PASSWORD_LENGTH:
        raise ValueError(
            f"New password must be at least {settings.MIN_PASSWORD_LENGTH} characters long"
        )
    if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"New password must be at most {BCRYPT_MAX_BYTES} bytes long")
    return v


class InterpreterSignInRequest(CamelModel):
    email: str
    password: str | None = Field(default=None, max_length=256)
    token: str | None = Field(default=None, max_length=256)
    new_password: str | None = Field(default=None, max_length=256)

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        return normalise_email(v)

    @field_validator("new_password")
    @classmethod
    def _validate_new_password(cls, v: str | None) -> str | None:
        return _check_new_password(v)


class InterpreterSignInResponse(CamelModel):
    success: bool = True
    user: UserSummary
    interpreter: InterpreterSummary
    token: str
    require_password_change: bool


class LoginRequest(CamelModel):
    email: str
    password: str = Field(max_length=256)

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        return normalise_email(v)


class LoginResponse(CamelModel):
    success: bool = True
    user: UserSummary
    token: str


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(max_length=256)
    new_password: str = Field(max_length=256)

    @field_validator("new_password")
    @classmethod
    def _validate_new_password(cls, v: str | None) -> str | None:
        return _check_new_password(v)


class AuthCheckResponse(CamelModel):
    success: bool = True
    user: UserSummary
    interpreter: InterpreterSummary
    credentials: CredentialPresence
