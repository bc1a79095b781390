"""
Interpreter Portal — application entry point.

This is the **only** file that assembles the app. All business logic
lives in the `api/`, `services/`, `models/` and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from interpreter_portal.api import pages
from interpreter_portal.api.v1.api import api_router
from interpreter_portal.api.v1.endpoints.auth import limiter
from interpreter_portal.core.config import settings
from interpreter_portal.core.exceptions import register_exception_handlers
from interpreter_portal.db.base import Base
from interpreter_portal.db.session import build_engine, build_session_factory
# Ensure all models are imported so metadata.create_all can see them
from interpreter_portal.models import InterpreterCredential, InterpreterProfile, User  # noqa: F401
from interpreter_portal.services.accounts import ensure_first_admin

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = build_engine(settings.DATABASE_URL)
    session_factory = build_session_factory(engine)
    app.state.engine = engine
    app.state.session_factory = session_factory

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    async with session_factory() as session:
        await ensure_first_admin(session)

    logger.info("%s v%s started (%s)", settings.PROJECT_NAME, settings.VERSION, settings.ENVIRONMENT)
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Interpreter accounts, sign-in and role-gated access",
        version=settings.VERSION,
        openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # slowapi expects the limiter on app.state
    application.state.limiter = limiter
    application.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore[arg-type]

    # Mount API v1
    application.include_router(api_router, prefix=settings.API_V1_PREFIX)

    # Role-gated pages
    application.include_router(pages.router)

    return application


app = create_app()
