"""
Rate limiting package for the ClaimFlow API.
"""

from .limiter import (
    RateLimit, RateLimitStatus, RateLimiter, RateLimiterUnavailable, build_rate_limits
)

__all__ = [
    'RateLimit',
    'RateLimitStatus',
    'RateLimiter',
    'RateLimiterUnavailable',
    'build_rate_limits',
]
