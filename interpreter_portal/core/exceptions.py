"""
Domain errors and global exception handlers.

Every error reaches the client as ``{"error": ..., "success": false}``.
Authentication failures share one generic message so a response never
reveals whether an email exists, has the wrong role, or simply typed the
wrong secret. Stack traces stay in the server log.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)

GENERIC_AUTH_MESSAGE = "Invalid credentials"


# ── Domain errors ───────────────────────────────────────────────────
class PortalError(Exception):
    """Base class for errors with a client-facing status and message."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    public_message: str = "Bad request"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.public_message)
        self.detail = detail or self.public_message


class AuthenticationError(PortalError):
    status_code = status.HTTP_401_UNAUTHORIZED
    public_message = GENERIC_AUTH_MESSAGE


class AccountNotFound(AuthenticationError):
    """No user with that email holds the expected role."""


class CredentialsMissing(AuthenticationError):
    """Interpreter profile exists without a credential record."""


class InvalidToken(AuthenticationError):
    """One-time login token mismatched or past its expiry."""


class InvalidCredentials(AuthenticationError):
    """Password (or neither secret) did not authenticate the account."""


class InvalidOrExpiredSessionCredential(AuthenticationError):
    public_message = "Authentication required"


class PermissionDenied(PortalError):
    status_code = status.HTTP_403_FORBIDDEN
    public_message = "Insufficient permissions"


class InactiveAccount(PortalError):
    status_code = status.HTTP_403_FORBIDDEN
    public_message = "User account is inactive"


class AccountExists(PortalError):
    status_code = status.HTTP_409_CONFLICT
    public_message = "An account with this email already exists"


class NotFound(PortalError):
    status_code = status.HTTP_404_NOT_FOUND
    public_message = "Not found"


class LoginRequired(Exception):
    """Raised by page guards; rendered as a redirect instead of JSON."""

    def __init__(self, location: str, callback_url: str | None = None):
        super().__init__(location)
        self.location = location
        self.callback_url = callback_url

    @property
    def url(self) -> str:
        if self.callback_url:
            return f"{self.location}?{urlencode({'callbackUrl': self.callback_url})}"
        return self.location


# ── Handlers ────────────────────────────────────────────────────────
async def _portal_error_handler(_request: Request, exc: PortalError) -> JSONResponse:
    # Authentication failures collapse to the class-level message; the
    # specific detail is for the log only.
    message = exc.public_message if isinstance(exc, AuthenticationError) else exc.detail
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message, "success": False},
        headers=headers,
    )


async def _login_required_handler(_request: Request, exc: LoginRequired) -> RedirectResponse:
    return RedirectResponse(url=exc.url, status_code=status.HTTP_303_SEE_OTHER)


async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "success": False},
        headers=getattr(exc, "headers", None),
    )


async def _integrity_error_handler(_request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error("Database integrity error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=409,
        content={"error": "Database constraint violation", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(PortalError, _portal_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(LoginRequired, _login_required_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(IntegrityError, _integrity_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
