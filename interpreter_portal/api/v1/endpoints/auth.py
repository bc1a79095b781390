"""
Auth endpoints — interpreter sign-in (one-time token / password with
first-login rotation), password login for other roles, logout and "me".
"""

# No `from __future__ import annotations` here: slowapi wraps the endpoints
# and FastAPI would resolve string annotations against slowapi's globals.
import logging

from fastapi import APIRouter, Depends, Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from interpreter_portal.api.v1.deps import get_current_user, get_db
from interpreter_portal.core.config import settings
from interpreter_portal.core.exceptions import AuthenticationError
from interpreter_portal.core.security import parse_ttl
from interpreter_portal.models.user import User
from interpreter_portal.schemas.auth import (InterpreterSignInRequest,
                                             InterpreterSignInResponse,
                                             LoginRequest, LoginResponse)
from interpreter_portal.schemas.common import MessageResponse
from interpreter_portal.schemas.user import InterpreterSummary, UserSummary
from interpreter_portal.services.accounts import login_with_password
from interpreter_portal.services.interpreter_auth import sign_in_interpreter

# Rate limiter — keyed by client IP
limiter = Limiter(key_func=get_remote_address, enabled=settings.RATE_LIMIT_ENABLED)

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def set_session_cookie(response: Response, token: str) -> None:
    """HttpOnly, SameSite=lax, secure in production; lifetime matches the token."""
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=bool(settings.COOKIE_SECURE),
        samesite="lax",
        max_age=int(parse_ttl(settings.SESSION_TOKEN_TTL).total_seconds()),
    )


@router.post("/interpreter-signin", response_model=InterpreterSignInResponse)
@limiter.limit(settings.SIGNIN_RATE_LIMIT)
async def interpreter_signin(
    request: Request,
    response: Response,
    body: InterpreterSignInRequest,
    db: AsyncSession = Depends(get_db),
) -> InterpreterSignInResponse:
    """Sign in with a one-time token or a password; optionally set the permanent password."""
    try:
        result = await sign_in_interpreter(
            db,
            body.email,
            password=body.password,
            token=body.token,
            new_password=body.new_password,
        )
    except AuthenticationError as exc:
        logger.warning(
            "Interpreter sign-in rejected for %s: %s (%s)",
            body.email,
            type(exc).__name__,
            exc.detail,
        )
        raise

    set_session_cookie(response, result.session_token)

    return InterpreterSignInResponse(
        user=UserSummary.model_validate(result.user),
        interpreter=InterpreterSummary.model_validate(result.profile),
        token=result.session_token,
        require_password_change=result.require_password_change,
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.SIGNIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Password login for accounts holding a permanent password."""
    try:
        user, token = await login_with_password(db, body.email, body.password)
    except AuthenticationError as exc:
        logger.warning("Login rejected for %s: %s", body.email, type(exc).__name__)
        raise

    set_session_cookie(response, token)
    return LoginResponse(user=UserSummary.model_validate(user), token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(response: Response) -> MessageResponse:
    """Clear the session cookie."""
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=UserSummary)
async def read_current_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Return the currently authenticated user."""
    return current_user
