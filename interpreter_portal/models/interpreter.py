"""
Interpreter profile & one-time credential models.
"""

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (JSON, Boolean, Column, DateTime, Enum, ForeignKey,
                        Integer, String, Text)
from sqlalchemy.ext.mutable import MutableList
from sqlalchemy.orm import relationship

from interpreter_portal.db.base import Base


class InterpreterStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    REJECTED = "REJECTED"


class Specialization(str, enum.Enum):
    HEALTHCARE = "HEALTHCARE"
    LEGAL = "LEGAL"
    BUSINESS = "BUSINESS"
    EDUCATION = "EDUCATION"
    GOVERNMENT = "GOVERNMENT"
    TECHNICAL = "TECHNICAL"
    CONFERENCE = "CONFERENCE"
    EMERGENCY = "EMERGENCY"
    GENERAL = "GENERAL"


class InterpreterProfile(Base):
    __tablename__ = "interpreter_profiles"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    user_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    first_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    last_name: str = Column(String(100), nullable=False)  # type: ignore[assignment]
    phone: str | None = Column(String(30), nullable=True)  # type: ignore[assignment]
    bio: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    status: InterpreterStatus = Column(  # type: ignore[assignment]
        Enum(InterpreterStatus, native_enum=False, length=20, validate_strings=True),
        nullable=False,
        default=InterpreterStatus.PENDING,
    )
    is_verified: bool = Column(Boolean, default=False, server_default="false")  # type: ignore[assignment]
    # Lists of language codes / Specialization values; JSON only at the column boundary.
    languages: list[str] = Column(MutableList.as_mutable(JSON), nullable=False, default=list)  # type: ignore[assignment]
    specializations: list[str] = Column(MutableList.as_mutable(JSON), nullable=False, default=list)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    user = relationship("User", back_populates="interpreter_profile")
    credentials = relationship(
        "InterpreterCredential",
        back_populates="interpreter_profile",
        uselist=False,
        cascade="all, delete-orphan",
    )


class InterpreterCredential(Base):
    __tablename__ = "interpreter_credentials"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    interpreter_profile_id: int = Column(  # type: ignore[assignment]
        Integer,
        ForeignKey("interpreter_profiles.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    temp_password: str | None = Column(String(128), nullable=True)  # type: ignore[assignment]  # bcrypt hash
    login_token: str | None = Column(String(64), unique=True, nullable=True)  # type: ignore[assignment]
    token_expiry: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    is_first_login: bool = Column(Boolean, default=True, server_default="true")  # type: ignore[assignment]
    last_login_at: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    interpreter_profile = relationship("InterpreterProfile", back_populates="credentials")
