"""
Fixed-window rate limiting over the shared key-value store.
"""

import time
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from claimflow.config import Settings
from claimflow.infrastructure.cache.store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimit:
    """Rate limit configuration."""
    requests: int  # Number of requests allowed
    window: int    # Time window in seconds
    message: str = "Rate limit exceeded"


@dataclass
class RateLimitStatus:
    """Current rate limit status."""
    limit: int
    remaining: int
    reset_time: int
    retry_after: Optional[int] = None
    degraded: bool = False

    @property
    def allowed(self) -> bool:
        return self.retry_after is None

    def to_headers(self) -> Dict[str, str]:
        """Convert to HTTP headers."""
        headers = {
            'X-RateLimit-Limit': str(self.limit),
            'X-RateLimit-Remaining': str(self.remaining),
            'X-RateLimit-Reset': str(self.reset_time)
        }
        if self.retry_after:
            headers['Retry-After'] = str(self.retry_after)
        return headers


class RateLimiterUnavailable(Exception):
    """Raised when the store is down and the limiter is configured to fail closed."""


class RateLimiter:
    """
    Fixed-window counter per (limit name, client identity).
    Counters live in the key-value store so every instance shares them.
    """

    def __init__(
        self,
        store: KeyValueStore,
        limits: Dict[str, RateLimit],
        enabled: bool = True,
        fail_open: bool = True,
        clock: Callable[[], float] = time.time
    ):
        self.store = store
        self.limits = limits
        self.enabled = enabled
        self.fail_open = fail_open
        self._clock = clock

    def get_limit(self, limit_name: str) -> RateLimit:
        return self.limits.get(limit_name, self.limits['api'])

    async def hit(self, limit_name: str, identity: str) -> RateLimitStatus:
        """
        Count one request against a named limit.

        Args:
            limit_name: Key of a configured limit (api, auth, upload, ai)
            identity: Client identity, usually its IP address

        Returns:
            RateLimitStatus; ``retry_after`` is set when the request is rejected

        Raises:
            RateLimiterUnavailable: Store failure while failing closed
        """
        rate_limit = self.get_limit(limit_name)
        current_time = int(self._clock())
        window = current_time - (current_time % rate_limit.window)
        reset_time = window + rate_limit.window

        if not self.enabled:
            return RateLimitStatus(rate_limit.requests, rate_limit.requests, reset_time)

        window_key = f"ratelimit:{limit_name}:{identity}:{window}"

        try:
            current_count = await self.store.incr_with_expiry(window_key, rate_limit.window)
        except Exception as e:
            if not self.fail_open:
                logger.error(f"Rate limiter store unavailable, rejecting request: {e}")
                raise RateLimiterUnavailable(str(e)) from e
            logger.warning(f"Rate limiter store unavailable, allowing request: {e}")
            return RateLimitStatus(
                limit=rate_limit.requests,
                remaining=rate_limit.requests,
                reset_time=reset_time,
                degraded=True
            )

        if current_count > rate_limit.requests:
            return RateLimitStatus(
                limit=rate_limit.requests,
                remaining=0,
                reset_time=reset_time,
                retry_after=max(1, reset_time - current_time)
            )

        return RateLimitStatus(
            limit=rate_limit.requests,
            remaining=max(0, rate_limit.requests - current_count),
            reset_time=reset_time
        )


def build_rate_limits(settings: Settings) -> Dict[str, RateLimit]:
    """Predefined rate limits, sized from settings."""
    return {
        'api': RateLimit(
            requests=settings.rate_limit_api_requests,
            window=settings.rate_limit_api_window,
            message="Too many requests from this IP, please try again later."
        ),
        'auth': RateLimit(
            requests=settings.rate_limit_auth_requests,
            window=settings.rate_limit_auth_window,
            message="Too many login attempts, please try again later."
        ),
        'upload': RateLimit(
            requests=settings.rate_limit_upload_requests,
            window=settings.rate_limit_upload_window,
            message="Too many uploads, please try again later."
        ),
        'ai': RateLimit(
            requests=settings.rate_limit_ai_requests,
            window=settings.rate_limit_ai_window,
            message="Too many AI requests, please try again later."
        ),
    }
