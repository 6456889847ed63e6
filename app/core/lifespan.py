from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

from app.core.config import settings
from app.db import models  # noqa: F401  (registers every table on Base.metadata)
from app.db.base import Base
from app.db.session import get_engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """FastAPI lifespan context manager for startup/shutdown events."""
    try:
        # Startup
        if settings.environment != "test":
            await verify_database_connection()
            if settings.auto_create_tables:
                await create_tables()
        if not settings.llm_enabled:
            logger.warning("LLM_API_URL not set, drafts will use templated fallback text")
        yield

        # Shutdown
    finally:
        await get_engine().dispose()


async def verify_database_connection() -> None:
    """Verify database connectivity at startup. Raises if connection fails."""
    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        raise RuntimeError(f"Failed to connect to database: {e}") from e


async def create_tables() -> None:
    """Create any missing tables from the model metadata."""
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")
