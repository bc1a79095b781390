"""
Shared test fixtures for the Interpreter Portal test suite.

Async throughout (aiosqlite + AsyncSession). Each test gets its own
in-memory database; the app's ``get_db`` dependency is pointed at it.
"""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from typing import Any

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-portal-suite"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENVIRONMENT"] = "development"
os.environ["CORS_ORIGINS"] = "*"

from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (AsyncSession, async_sessionmaker,
                                    create_async_engine)
from sqlalchemy.orm import selectinload
from sqlalchemy.pool import StaticPool

from interpreter_portal.api.v1.deps import get_db
from interpreter_portal.core.security import (create_session_token,
                                              get_password_hash)
from interpreter_portal.db.base import Base
from interpreter_portal.main import app
from interpreter_portal.models import (InterpreterCredential,
                                       InterpreterProfile, InterpreterStatus,
                                       User, UserRole)


@pytest.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Fresh in-memory database per test; tables created up front."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for direct queries in tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app and this test's database."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db, None)


# ── Seeding helpers ─────────────────────────────────────────────────
@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    async def _make(
        email: str,
        role: UserRole = UserRole.CLIENT,
        password: str | None = "password123",
        is_active: bool = True,
    ) -> User:
        user = User(
            email=email,
            name=email.split("@")[0],
            role=role,
            hashed_password=get_password_hash(password) if password else None,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_interpreter(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Seed an interpreter user + profile (+ credential unless ``with_credentials=False``)."""

    async def _make(
        email: str = "interp@test.com",
        *,
        temp_password: str | None = None,
        password: str | None = None,
        login_token: str | None = None,
        token_expiry: datetime | None = None,
        is_first_login: bool = True,
        with_credentials: bool = True,
        is_active: bool = True,
    ) -> User:
        user = User(
            email=email,
            name="Ana Souza",
            role=UserRole.INTERPRETER,
            hashed_password=get_password_hash(password) if password else None,
            is_active=is_active,
        )
        profile = InterpreterProfile(
            user=user,
            first_name="Ana",
            last_name="Souza",
            status=InterpreterStatus.APPROVED,
            is_verified=True,
            languages=["en", "pt"],
            specializations=["HEALTHCARE"],
        )
        if with_credentials:
            profile.credentials = InterpreterCredential(
                temp_password=get_password_hash(temp_password) if temp_password else None,
                login_token=login_token,
                token_expiry=token_expiry,
                is_first_login=is_first_login,
            )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def fetch_credential(session_factory) -> Callable[[str], Awaitable[Any]]:
    """Load the interpreter's user + credential through a fresh session."""

    async def _fetch(email: str) -> tuple[User, InterpreterCredential | None]:
        async with session_factory() as session:
            result = await session.execute(
                select(User)
                .where(User.email == email)
                .options(
                    selectinload(User.interpreter_profile).selectinload(
                        InterpreterProfile.credentials
                    )
                )
            )
            user = result.scalar_one()
            return user, user.interpreter_profile.credentials

    return _fetch


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Bearer header carrying a freshly signed session credential for *user*."""

    def _headers(user: User) -> dict[str, str]:
        token = create_session_token(
            {"user_id": user.id, "email": user.email, "role": UserRole(user.role).value}
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
