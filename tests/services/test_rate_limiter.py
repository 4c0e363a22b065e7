from __future__ import annotations

import asyncio

from learnhub.services.rate_limiter import InMemoryRateLimiter, RateLimitConfig


def test_burst_then_denied() -> None:
    limiter = InMemoryRateLimiter()
    config = RateLimitConfig(capacity=3, refill_rate=0.001)

    async def _run() -> list[bool]:
        return [(await limiter.check("ip:1.2.3.4", config)).allowed for _ in range(4)]

    assert asyncio.run(_run()) == [True, True, True, False]


def test_denied_result_carries_retry_after() -> None:
    limiter = InMemoryRateLimiter()
    config = RateLimitConfig(capacity=1, refill_rate=0.5)

    async def _run():
        await limiter.check("user:abc", config)
        return await limiter.check("user:abc", config)

    result = asyncio.run(_run())
    assert result.allowed is False
    assert result.remaining == 0
    assert result.limit == 1
    assert 0 < result.retry_after <= 2.0


def test_keys_are_independent_and_resettable() -> None:
    limiter = InMemoryRateLimiter()
    config = RateLimitConfig(capacity=1, refill_rate=0.001)

    async def _run() -> tuple[bool, bool, bool]:
        await limiter.check("ip:a", config)
        other = (await limiter.check("ip:b", config)).allowed
        blocked = (await limiter.check("ip:a", config)).allowed
        await limiter.reset("ip:a")
        after_reset = (await limiter.check("ip:a", config)).allowed
        return other, blocked, after_reset

    assert asyncio.run(_run()) == (True, False, True)
