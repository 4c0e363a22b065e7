"""Rate limiting as a route dependency.

Applied per route (only login today) rather than as middleware, so health
and metrics endpoints are never throttled.  Buckets are keyed by the
token's ``sub`` when a bearer token is present, else by client IP.
"""

from __future__ import annotations

import logging

import jwt
from fastapi import HTTPException, Request, status

from learnhub.core.metrics import RATE_LIMIT_HITS
from learnhub.services.rate_limiter import RateLimitConfig, rate_limiter

logger = logging.getLogger(__name__)


def require_rate_limit(config: RateLimitConfig = RateLimitConfig()):
    async def _check(request: Request) -> None:
        key = _build_key(request)
        result = await rate_limiter.check(key, config)
        if result.allowed:
            return

        RATE_LIMIT_HITS.labels(key_type=key.split(":", 1)[0]).inc()
        logger.warning("Rate limit exceeded key=%s", key)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
            headers={
                "Retry-After": str(int(result.retry_after) + 1),
                "X-RateLimit-Limit": str(result.limit),
                "X-RateLimit-Remaining": "0",
            },
        )

    return _check


def _build_key(request: Request) -> str:
    # Unverified decode: a forged sub only earns its own bucket
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        try:
            claims = jwt.decode(auth_header[7:], options={"verify_signature": False})
        except jwt.InvalidTokenError:
            claims = {}
        if claims.get("sub"):
            return f"user:{claims['sub']}"

    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"
