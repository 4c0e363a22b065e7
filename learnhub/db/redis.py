"""Redis connection management.

When REDIS_URL is configured a shared client is created at import time;
otherwise ``redis_pool`` is None and the token blacklist and rate limiter
use their in-memory implementations.  Only ephemeral state lives in Redis;
catalog and enrollment data never do.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from learnhub.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Ping on startup, close the pool on shutdown.

    A failed ping is logged but does not abort startup.
    """
    if redis_pool is None:
        logger.info("No REDIS_URL configured, using in-memory fallbacks")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]
        logger.info("Redis connected: %s", SETTINGS.redis_url)
    except Exception:
        logger.exception("Redis connection failed on startup")
        yield
        return

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")


async def redis_status() -> str:
    """Return "ok", "unavailable" or "not_configured" for /health."""
    if redis_pool is None:
        return "not_configured"
    try:
        await redis_pool.ping()  # type: ignore[misc]
    except Exception:
        logger.warning("Redis health check failed", exc_info=True)
        return "unavailable"
    return "ok"
