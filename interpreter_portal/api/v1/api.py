"""
V1 API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from interpreter_portal.api.v1.endpoints import admin, auth, interpreter, system

api_router = APIRouter()

# Sign-in, login, logout, me
api_router.include_router(auth.router)

# Interpreter self-service
api_router.include_router(interpreter.router)

# Admin provisioning
api_router.include_router(admin.router)

# Health
api_router.include_router(system.router)
