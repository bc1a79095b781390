"""
FastAPI dependencies — database session and the session/role gate.

The gate fails closed: a missing, malformed or expired session credential,
an unknown or inactive user, or a role outside the permitted set always
ends in a rejection (JSON 401/403 for API routes, a redirect for pages).
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Callable, Coroutine
from typing import Any, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from interpreter_portal.core.config import settings
from interpreter_portal.core.exceptions import (
    InvalidOrExpiredSessionCredential, LoginRequired, PermissionDenied)
from interpreter_portal.core.security import verify_session_token
from interpreter_portal.models.interpreter import InterpreterProfile
from interpreter_portal.models.user import ADMIN_ROLES, User, UserRole

logger = logging.getLogger(__name__)

# auto_error=False so the cookie can be consulted when the header is absent
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False
)

LOGIN_PAGES = {
    UserRole.INTERPRETER: "/auth/interpreter-signin",
    UserRole.ADMIN: "/auth/admin",
    UserRole.SUPER_ADMIN: "/auth/admin",
    UserRole.CLIENT: "/auth/signin",
}
UNAUTHORIZED_PAGE = "/unauthorized"


# ── Database session ────────────────────────────────────────────────
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Per-request AsyncSession from the factory built at startup."""
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        yield session


# ── Session credential ──────────────────────────────────────────────
def extract_session_token(request: Request, header_token: Optional[str]) -> Optional[str]:
    """Header first, then the session cookie. Tolerates a ``Bearer`` prefix in the cookie."""
    if header_token:
        return header_token
    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if cookie and cookie.startswith("Bearer "):
        return cookie.split(" ", 1)[1]
    return cookie or None


async def _resolve_user(request: Request, header_token: Optional[str], db: AsyncSession) -> User:
    token = extract_session_token(request, header_token)
    if not token:
        raise InvalidOrExpiredSessionCredential("No session credential presented")

    payload = verify_session_token(token)
    user_id = payload.get("user_id")
    if not isinstance(user_id, int) or not payload.get("role"):
        raise InvalidOrExpiredSessionCredential("Session credential missing required claims")

    result = await db.execute(
        select(User)
        .where(User.id == user_id)
        .options(
            selectinload(User.interpreter_profile).selectinload(InterpreterProfile.credentials)
        )
    )
    user = result.scalar_one_or_none()
    if user is None or not user.is_active:
        raise InvalidOrExpiredSessionCredential(f"User {user_id} unknown or inactive")
    return user


def role_permitted(user: User, roles: frozenset[UserRole]) -> bool:
    """Stored role must be in *roles*; admins must also be allow-listed when one is configured."""
    role = UserRole(user.role)
    if role not in roles:
        return False
    if role in ADMIN_ROLES and settings.ADMIN_EMAIL_ALLOWLIST:
        return user.email.lower() in settings.ADMIN_EMAIL_ALLOWLIST
    return True


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode the session credential from header or cookie and load its user."""
    return await _resolve_user(request, token, db)


def require_roles(*roles: UserRole) -> Callable[..., Coroutine[Any, Any, User]]:
    """API guard: 401 without a valid session, 403 for a role outside *roles*."""
    permitted = frozenset(roles)

    async def _guard(
        request: Request,
        current_user: User = Depends(get_current_user),
    ) -> User:
        if not role_permitted(current_user, permitted):
            logger.warning(
                "Role gate denied %s (%s) on %s",
                current_user.email,
                UserRole(current_user.role).value,
                request.url.path,
            )
            raise PermissionDenied()
        return current_user

    return _guard


def require_page_roles(*roles: UserRole) -> Callable[..., Coroutine[Any, Any, User]]:
    """Page guard: redirect to the matching login page, or to /unauthorized on role mismatch."""
    permitted = frozenset(roles)
    login_page = LOGIN_PAGES[roles[0]] if roles else LOGIN_PAGES[UserRole.CLIENT]

    async def _guard(
        request: Request,
        token: Optional[str] = Depends(oauth2_scheme),
        db: AsyncSession = Depends(get_db),
    ) -> User:
        try:
            user = await _resolve_user(request, token, db)
        except InvalidOrExpiredSessionCredential:
            raise LoginRequired(login_page, callback_url=request.url.path) from None
        if not role_permitted(user, permitted):
            logger.warning(
                "Page gate denied %s (%s) on %s",
                user.email,
                UserRole(user.role).value,
                request.url.path,
            )
            raise LoginRequired(UNAUTHORIZED_PAGE)
        return user

    return _guard


require_admin = require_roles(UserRole.ADMIN, UserRole.SUPER_ADMIN)
require_interpreter = require_roles(UserRole.INTERPRETER)
