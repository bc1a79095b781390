"""
Async SQLAlchemy engine & session factory (asyncpg driver).

Nothing is created at import time: the application lifespan builds the
engine on startup, parks it on ``app.state`` and disposes it on shutdown.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import (AsyncEngine, AsyncSession,
                                    async_sessionmaker, create_async_engine)


def build_engine(database_url: str) -> AsyncEngine:
    engine_args: dict = {
        "echo": False,
        "pool_pre_ping": True,
    }

    if "postgresql" in database_url:
        engine_args.update(
            {
                "pool_size": 20,
                "max_overflow": 10,
                "pool_recycle": 300,
            }
        )

    return create_async_engine(database_url, **engine_args)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
