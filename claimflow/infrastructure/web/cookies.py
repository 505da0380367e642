"""
Auth cookie helpers.
"""

from starlette.responses import Response

from claimflow.config import Settings

ACCESS_COOKIE = "token"
REFRESH_COOKIE = "refreshToken"


def set_auth_cookies(response: Response, settings: Settings, access_token: str, refresh_token: str) -> None:
    """Set the httpOnly access and refresh cookies; ``secure`` only in production."""
    response.set_cookie(
        ACCESS_COOKIE,
        access_token,
        max_age=settings.access_token_ttl_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    response.set_cookie(
        REFRESH_COOKIE,
        refresh_token,
        max_age=settings.refresh_token_ttl_seconds,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    response.delete_cookie(ACCESS_COOKIE, httponly=True, secure=settings.is_production, samesite="lax")
    response.delete_cookie(REFRESH_COOKIE, httponly=True, secure=settings.is_production, samesite="strict")
