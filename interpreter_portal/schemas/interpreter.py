"""Pydantic schemas for admin-side interpreter provisioning."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from interpreter_portal.models.interpreter import Specialization
from interpreter_portal.schemas.common import CamelModel, normalise_email
from interpreter_portal.schemas.user import InterpreterDetail


class InterpreterCreate(CamelModel):
    email: str
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    bio: str | None = None
    languages: list[str] = Field(min_length=1)
    specializations: list[Specialization] = Field(min_length=1)
    auto_approve: bool = False
    send_credentials: bool = True

    @field_validator("email")
    @classmethod
    def _normalise_email(cls, v: str) -> str:
        return normalise_email(v)

    @field_validator("first_name", "last_name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be empty")
        return v

    @field_validator("languages")
    @classmethod
    def _normalise_languages(cls, v: list[str]) -> list[str]:
        codes: list[str] = []
        for code in v:
            code = code.strip().lower()
            if not code:
                raise ValueError("Language codes must not be empty")
            if code not in codes:
                codes.append(code)
        return codes


class IssuedCredentials(CamelModel):
    """Plaintext one-time credentials; returned once, never stored in this form."""

    temp_password: str
    login_token: str
    token_expiry: datetime
    login_url: str


class InterpreterProvisionResponse(CamelModel):
    success: bool = True
    message: str
    interpreter: InterpreterDetail
    credentials: IssuedCredentials | None = None
