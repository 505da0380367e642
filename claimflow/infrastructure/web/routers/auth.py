"""
Authentication router for user authentication endpoints.
Handles registration, login, token refresh, logout and password reset.
"""

import logging
from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request, Response, status
from sqlalchemy.orm import Session

from claimflow.application.dto.user_dto import (
    RegisterRequestDTO, LoginRequestDTO, RefreshRequestDTO,
    ForgotPasswordRequestDTO, ResetPasswordRequestDTO
)
from claimflow.application.use_cases.auth_use_cases import (
    ClientInfo, RegisterUseCase, LoginUseCase, RefreshTokenUseCase, LogoutUseCase,
    GetCurrentUserUseCase, ForgotPasswordUseCase, ResetPasswordUseCase
)
from claimflow.infrastructure.auth.dependencies import CurrentUser, extract_token
from claimflow.infrastructure.container import ServiceContainer, get_container
from claimflow.infrastructure.db.database import get_db
from claimflow.infrastructure.rate_limiting.dependencies import auth_rate_limit, client_ip
from claimflow.infrastructure.web.cookies import REFRESH_COOKIE, set_auth_cookies, clear_auth_cookies
from claimflow.infrastructure.web.responses import envelope

logger = logging.getLogger(__name__)

router = APIRouter()

Container = Annotated[ServiceContainer, Depends(get_container)]
DbSession = Annotated[Session, Depends(get_db)]

FORGOT_PASSWORD_MESSAGE = "If an account exists, a password reset email has been sent."


def get_client_info(request: Request, container: Container) -> ClientInfo:
    """Dependency capturing request metadata stored on new sessions."""
    return ClientInfo(
        user_agent=request.headers.get("user-agent"),
        ip_address=client_ip(request, container.settings.trust_forwarded_for),
    )


Client = Annotated[ClientInfo, Depends(get_client_info)]


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(auth_rate_limit)]
)
async def register(
    request: RegisterRequestDTO,
    response: Response,
    client: Client,
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    """
    Register a new organization and its first admin user.

    - **email**: Valid email address
    - **password**: At least 8 characters with a letter and a digit
    - **firstName** / **lastName**: Admin's name
    - **organizationName**: Name of the new organization
    """
    result = await RegisterUseCase(db, container.passwords, container.tokens).execute(request, client)
    set_auth_cookies(response, container.settings, result.token, result.refresh_token)
    return envelope(result, message="Registration successful")


@router.post("/login", dependencies=[Depends(auth_rate_limit)])
async def login(
    request: LoginRequestDTO,
    response: Response,
    client: Client,
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    """
    Authenticate user and return access tokens.

    - **email**: User email address
    - **password**: User password
    """
    result = await LoginUseCase(db, container.passwords, container.tokens).execute(request, client)
    set_auth_cookies(response, container.settings, result.token, result.refresh_token)
    return envelope(result, message="Login successful")


@router.post("/refresh", dependencies=[Depends(auth_rate_limit)])
async def refresh_token(
    http_request: Request,
    response: Response,
    client: Client,
    container: Container,
    db: DbSession,
    request: Annotated[Optional[RefreshRequestDTO], Body()] = None
) -> Dict[str, Any]:
    """
    Rotate the token pair.
    The refreshToken cookie takes precedence over the request body.
    """
    token = http_request.cookies.get(REFRESH_COOKIE) or (request.refresh_token if request else None)
    result = await RefreshTokenUseCase(db, container.tokens, container.revocations).execute(token, client)
    set_auth_cookies(response, container.settings, result.token, result.refresh_token)
    return envelope(result)


@router.post("/logout")
async def logout(
    http_request: Request,
    response: Response,
    container: Container,
    request: Annotated[Optional[RefreshRequestDTO], Body()] = None
) -> Dict[str, Any]:
    """
    Revoke the presented tokens and clear auth cookies.
    Always succeeds so clients can reset their state.
    """
    refresh = http_request.cookies.get(REFRESH_COOKIE) or (request.refresh_token if request else None)
    await LogoutUseCase(container.tokens, container.revocations).execute(extract_token(http_request), refresh)
    clear_auth_cookies(response, container.settings)
    return envelope(message="Logged out successfully")


@router.get("/me")
async def get_current_user_profile(current_user: CurrentUser, db: DbSession) -> Dict[str, Any]:
    """Get current user profile information."""
    user = await GetCurrentUserUseCase(db).execute(current_user)
    return envelope(user)


@router.post("/forgot-password", dependencies=[Depends(auth_rate_limit)])
async def forgot_password(
    request: ForgotPasswordRequestDTO,
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    """
    Request a password reset.
    The response is identical whether or not the account exists.
    """
    settings = container.settings
    reset_token = await ForgotPasswordUseCase(db, settings.password_reset_expire_minutes).execute(request.email)
    if reset_token and settings.is_development:
        logger.info(f"Password reset link: {settings.api_prefix}/auth/reset-password/{reset_token}")
    return envelope(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password/{token}")
async def reset_password(
    token: str,
    request: ResetPasswordRequestDTO,
    container: Container,
    db: DbSession
) -> Dict[str, Any]:
    """Set a new password using a reset token."""
    await ResetPasswordUseCase(db, container.passwords).execute(token, request)
    return envelope(message="Password has been reset successfully.")
