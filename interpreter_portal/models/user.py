"""
User model — identity & role-based access control.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, Integer, String
from sqlalchemy.orm import relationship

from interpreter_portal.db.base import Base


class UserRole(str, enum.Enum):
    ADMIN = "ADMIN"
    INTERPRETER = "INTERPRETER"
    CLIENT = "CLIENT"
    SUPER_ADMIN = "SUPER_ADMIN"


ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    email: str = Column(String(320), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    # Interpreters provisioned by an admin have no permanent password until first login.
    hashed_password: str | None = Column(String(128), nullable=True)  # type: ignore[assignment]
    name: str | None = Column(String(200), nullable=True)  # type: ignore[assignment]
    role: UserRole = Column(  # type: ignore[assignment]
        Enum(UserRole, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=UserRole.CLIENT,
    )
    is_active: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    interpreter_profile = relationship(
        "InterpreterProfile",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
