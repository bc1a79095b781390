"""
Admin endpoints — interpreter provisioning and one-time credential re-issue.

Plaintext temporary passwords and login tokens appear in these responses
exactly once; only their hashes / opaque values are persisted.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from interpreter_portal.api.v1.deps import get_db, require_admin
from interpreter_portal.core.config import settings
from interpreter_portal.models.user import User
from interpreter_portal.schemas.interpreter import (
    InterpreterCreate, InterpreterProvisionResponse, IssuedCredentials)
from interpreter_portal.schemas.user import interpreter_detail
from interpreter_portal.services.accounts import (OneTimeCredentials,
                                                  provision_interpreter,
                                                  reissue_credentials)

router = APIRouter(prefix="/admin", tags=["admin"])

INTERPRETER_SIGNIN_PATH = "/auth/interpreter-signin"


def _issued(credentials: OneTimeCredentials) -> IssuedCredentials:
    return IssuedCredentials(
        temp_password=credentials.temp_password,
        login_token=credentials.login_token,
        token_expiry=credentials.token_expiry,
        login_url=f"{settings.PUBLIC_BASE_URL.rstrip('/')}{INTERPRETER_SIGNIN_PATH}",
    )


@router.post("/interpreters", response_model=InterpreterProvisionResponse, status_code=201)
async def create_interpreter(
    body: InterpreterCreate,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> InterpreterProvisionResponse:
    """Create an interpreter account awaiting its first login."""
    result = await provision_interpreter(db, body)
    return InterpreterProvisionResponse(
        message="Interpreter account created successfully",
        interpreter=interpreter_detail(result.profile, result.user.email),
        credentials=_issued(result.credentials) if body.send_credentials else None,
    )


@router.post(
    "/interpreters/{profile_id}/credentials",
    response_model=InterpreterProvisionResponse,
)
async def reissue_interpreter_credentials(
    profile_id: int,
    db: AsyncSession = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> InterpreterProvisionResponse:
    """Issue a fresh temporary password and login token; the account returns to first login."""
    result = await reissue_credentials(db, profile_id)
    return InterpreterProvisionResponse(
        message="Login credentials re-issued",
        interpreter=interpreter_detail(result.profile, result.user.email),
        credentials=_issued(result.credentials),
    )
