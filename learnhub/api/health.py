"""Liveness and readiness endpoints.

/health reports dependency status but always answers 200; a degraded
Redis only means the instance is impaired, not dead.  /ready answers 200
whenever the process can serve, since every Redis-backed store has an
in-memory fallback.
"""

from __future__ import annotations

from fastapi import APIRouter, Response

from learnhub.db.redis import redis_status

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    redis = await redis_status()
    return {
        "status": "degraded" if redis == "unavailable" else "ok",
        "checks": {"redis": redis},
    }


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
