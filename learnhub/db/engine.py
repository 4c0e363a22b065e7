"""Async SQLAlchemy engine and declarative base.

The durable schema (learnhub/db/tables.py) hangs off ``Base``.  When
DATABASE_URL is set an asyncpg engine is created and checked at startup;
when it is unset the engine is None and the service runs on its in-memory
repositories.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from learnhub.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all table models."""


engine: AsyncEngine | None
if SETTINGS.database_url:
    engine = create_async_engine(
        SETTINGS.database_url,
        echo=SETTINGS.is_dev,
        pool_size=5,
        max_overflow=10,
    )
else:
    engine = None


@asynccontextmanager
async def lifespan_db():
    if engine is None:
        logger.info("No DATABASE_URL configured, using in-memory repositories")
        yield
        return

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info(
            "Database reachable: %s",
            engine.url.render_as_string(hide_password=True),
        )
    except Exception:
        logger.exception("Database check failed on startup")

    yield
    await engine.dispose()
    logger.info("Database engine disposed")
