"""
Unit tests for the fixed-window rate limiter.
"""

import pytest
from unittest.mock import AsyncMock

from claimflow.infrastructure.cache.store import InMemoryKeyValueStore
from claimflow.infrastructure.rate_limiting.limiter import (
    RateLimit, RateLimiter, RateLimiterUnavailable
)


LIMITS = {
    "api": RateLimit(requests=3, window=60),
    "auth": RateLimit(requests=2, window=900, message="Too many login attempts, please try again later."),
}


class TestRateLimiter:
    """Test cases for RateLimiter."""

    def setup_method(self):
        self.now = [1200.0]
        clock = lambda: self.now[0]
        self.limiter = RateLimiter(InMemoryKeyValueStore(clock=clock), LIMITS, clock=clock)

    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        """Test the limit-th request passes and the next is rejected."""
        statuses = [await self.limiter.hit("api", "1.2.3.4") for _ in range(4)]

        assert [s.allowed for s in statuses] == [True, True, True, False]
        assert [s.remaining for s in statuses] == [2, 1, 0, 0]
        assert statuses[-1].retry_after == 60

    @pytest.mark.asyncio
    async def test_headers(self):
        status = await self.limiter.hit("api", "1.2.3.4")
        headers = status.to_headers()

        assert headers["X-RateLimit-Limit"] == "3"
        assert headers["X-RateLimit-Remaining"] == "2"
        assert headers["X-RateLimit-Reset"] == "1260"
        assert "Retry-After" not in headers

    @pytest.mark.asyncio
    async def test_identities_and_limits_are_independent(self):
        """Test counters are kept per limit name and per client."""
        for _ in range(2):
            await self.limiter.hit("auth", "1.2.3.4")

        assert (await self.limiter.hit("auth", "1.2.3.4")).allowed is False
        assert (await self.limiter.hit("auth", "5.6.7.8")).allowed is True
        assert (await self.limiter.hit("api", "1.2.3.4")).allowed is True

    @pytest.mark.asyncio
    async def test_new_window_resets(self):
        """Test a new window starts a fresh count."""
        for _ in range(4):
            await self.limiter.hit("api", "1.2.3.4")

        self.now[0] += 60

        assert (await self.limiter.hit("api", "1.2.3.4")).allowed is True

    @pytest.mark.asyncio
    async def test_unknown_limit_uses_api(self):
        assert self.limiter.get_limit("missing") is LIMITS["api"]

    @pytest.mark.asyncio
    async def test_disabled(self):
        limiter = RateLimiter(InMemoryKeyValueStore(), LIMITS, enabled=False)

        for _ in range(10):
            assert (await limiter.hit("api", "1.2.3.4")).allowed is True

    @pytest.mark.asyncio
    async def test_fail_open(self):
        """Test store failures let requests through when failing open."""
        store = AsyncMock()
        store.incr_with_expiry.side_effect = ConnectionError("down")
        limiter = RateLimiter(store, LIMITS, fail_open=True)

        status = await limiter.hit("api", "1.2.3.4")

        assert status.allowed is True
        assert status.degraded is True

    @pytest.mark.asyncio
    async def test_fail_closed(self):
        """Test store failures reject requests when failing closed."""
        store = AsyncMock()
        store.incr_with_expiry.side_effect = ConnectionError("down")
        limiter = RateLimiter(store, LIMITS, fail_open=False)

        with pytest.raises(RateLimiterUnavailable):
            await limiter.hit("api", "1.2.3.4")
