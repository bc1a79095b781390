"""
Interpreter self-service endpoints. Every route requires the INTERPRETER role.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from interpreter_portal.api.v1.deps import get_db, require_interpreter
from interpreter_portal.core.exceptions import CredentialsMissing
from interpreter_portal.models.user import User
from interpreter_portal.schemas.auth import (AuthCheckResponse,
                                             ChangePasswordRequest)
from interpreter_portal.schemas.common import MessageResponse
from interpreter_portal.schemas.user import (CredentialPresence,
                                             InterpreterDetail,
                                             InterpreterSummary, UserSummary,
                                             interpreter_detail)
from interpreter_portal.services.accounts import change_interpreter_password

router = APIRouter(prefix="/interpreter", tags=["interpreter"])


@router.get("/auth-check", response_model=AuthCheckResponse)
async def auth_check(
    current_user: User = Depends(require_interpreter),
) -> AuthCheckResponse:
    """Confirm the session and report which one-time credentials are outstanding."""
    profile = current_user.interpreter_profile
    if profile is None or profile.credentials is None:
        raise CredentialsMissing(f"User {current_user.id} has no interpreter credentials")
    credential = profile.credentials
    return AuthCheckResponse(
        user=UserSummary.model_validate(current_user),
        interpreter=InterpreterSummary.model_validate(profile),
        credentials=CredentialPresence(
            has_temp_password=credential.temp_password is not None,
            has_login_token=credential.login_token is not None,
            is_first_login=bool(credential.is_first_login),
        ),
    )


@router.get("/profile", response_model=InterpreterDetail)
async def read_profile(
    current_user: User = Depends(require_interpreter),
) -> InterpreterDetail:
    profile = current_user.interpreter_profile
    if profile is None:
        raise CredentialsMissing(f"User {current_user.id} has no interpreter profile")
    return interpreter_detail(profile, current_user.email)


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_interpreter),
) -> MessageResponse:
    await change_interpreter_password(db, current_user, body.current_password, body.new_password)
    return MessageResponse(message="Password changed successfully")
