"""
Rate limiting FastAPI dependencies.
"""

from fastapi import Request
from starlette.requests import HTTPConnection

from claimflow.domain.models.base import RateLimitExceededError, ServiceUnavailableError
from claimflow.infrastructure.container import get_container
from .limiter import RateLimitStatus, RateLimiterUnavailable


def client_ip(connection: HTTPConnection, trust_forwarded_for: bool = True) -> str:
    """
    Client identity for rate limiting.
    The first X-Forwarded-For hop when the proxy is trusted, else the socket peer.
    """
    if trust_forwarded_for:
        forwarded = connection.headers.get('x-forwarded-for')
        if forwarded:
            first_hop = forwarded.split(',')[0].strip()
            if first_hop:
                return first_hop
    return connection.client.host if connection.client else 'unknown'


async def enforce_rate_limit(connection: HTTPConnection, limit_name: str) -> RateLimitStatus:
    """
    Count one request or websocket handshake against a named limit.

    Raises:
        RateLimitExceededError: The window is exhausted
        ServiceUnavailableError: The store is down and the limiter fails closed
    """
    container = get_container(connection)
    limiter = container.rate_limiter
    identity = client_ip(connection, container.settings.trust_forwarded_for)

    try:
        status_result = await limiter.hit(limit_name, identity)
    except RateLimiterUnavailable:
        raise ServiceUnavailableError()

    if not status_result.allowed:
        raise RateLimitExceededError(
            limiter.get_limit(limit_name).message,
            headers=status_result.to_headers()
        )

    return status_result


def create_rate_limit_dependency(limit_name: str):
    """
    Create a FastAPI dependency for rate limiting.

    Usage:
        auth_rate_limit = create_rate_limit_dependency('auth')

        @router.post("/login", dependencies=[Depends(auth_rate_limit)])
        async def login(...):
            ...
    """
    async def rate_limit_dependency(request: Request) -> RateLimitStatus:
        return await enforce_rate_limit(request, limit_name)

    rate_limit_dependency.__name__ = f"{limit_name}_rate_limit"
    return rate_limit_dependency


# Predefined dependencies
api_rate_limit = create_rate_limit_dependency('api')
auth_rate_limit = create_rate_limit_dependency('auth')
upload_rate_limit = create_rate_limit_dependency('upload')
ai_rate_limit = create_rate_limit_dependency('ai')
