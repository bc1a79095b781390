"""
Role-gated page routes.

Only the access decision lives here; each page is an empty shell that the
frontend bundle takes over. Unauthenticated visitors are redirected to the
login page for the area, signed-in users with another role to /unauthorized.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from interpreter_portal.api.v1.deps import require_page_roles
from interpreter_portal.core.config import settings
from interpreter_portal.models.user import User, UserRole

router = APIRouter(include_in_schema=False)

_SHELL = (
    "<!doctype html><html><head><meta charset=\"utf-8\"><title>{title}</title></head>"
    "<body><div id=\"root\" data-area=\"{area}\"></div></body></html>"
)


def _shell(title: str, area: str) -> HTMLResponse:
    return HTMLResponse(_SHELL.format(title=f"{title} | {settings.PROJECT_NAME}", area=area))


@router.get("/interpreter-portal/interpreter", response_class=HTMLResponse)
async def interpreter_dashboard(
    _user: User = Depends(require_page_roles(UserRole.INTERPRETER)),
) -> HTMLResponse:
    return _shell("Interpreter dashboard", "interpreter")


@router.get("/admin/dashboard", response_class=HTMLResponse)
async def admin_dashboard(
    _user: User = Depends(require_page_roles(UserRole.ADMIN, UserRole.SUPER_ADMIN)),
) -> HTMLResponse:
    return _shell("Admin dashboard", "admin")


@router.get("/dashboard", response_class=HTMLResponse)
async def client_dashboard(
    _user: User = Depends(require_page_roles(UserRole.CLIENT)),
) -> HTMLResponse:
    return _shell("Dashboard", "client")
