"""
Authentication use cases.
Registration, login, token refresh/rotation, logout and password reset.
"""

import hashlib
import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Tuple

from claimflow.application.dto.user_dto import (
    RegisterRequestDTO, LoginRequestDTO, ResetPasswordRequestDTO,
    AuthResponseDTO, UserResponseDTO, OrganizationResponseDTO
)
from claimflow.application.use_cases.base_use_case import CommandUseCase, QueryUseCase
from claimflow.domain.models.base import UnauthorizedError, ValidationError, EntityNotFoundError
from claimflow.domain.models.user import UserRole, AuthContext
from claimflow.infrastructure.auth.passwords import PasswordHasher
from claimflow.infrastructure.auth.revocation import RevocationList
from claimflow.infrastructure.auth.sessions import SessionStore
from claimflow.infrastructure.auth.token_codec import TokenCodec, TokenKind
from claimflow.infrastructure.db.models import UserModel, OrganizationModel, utcnow
from claimflow.infrastructure.repositories.user_repository import (
    SQLAlchemyUserRepository, SQLAlchemyOrganizationRepository
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH_TOKEN = "Invalid refresh token"


@dataclass(frozen=True)
class ClientInfo:
    """Request metadata recorded on new sessions."""
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class TokenIssuer:
    """Mints a token pair backed by a fresh session row."""

    def __init__(self, tokens: TokenCodec):
        self.tokens = tokens

    def issue(self, sessions: SessionStore, user: UserModel, client: ClientInfo) -> Tuple[str, str]:
        sessions.create(
            user.id,
            self.tokens.lifetime(TokenKind.REFRESH),
            user_agent=client.user_agent,
            ip_address=client.ip_address,
        )
        access_token = self.tokens.sign({"id": user.id, "role": UserRole(user.role).value}, TokenKind.ACCESS)
        refresh_token = self.tokens.sign({"id": user.id}, TokenKind.REFRESH)
        return access_token, refresh_token


def _auth_response(
    user: UserModel,
    organization: Optional[OrganizationModel],
    access_token: str,
    refresh_token: str
) -> AuthResponseDTO:
    return AuthResponseDTO(
        user=UserResponseDTO.model_validate(user),
        organization=OrganizationResponseDTO.model_validate(organization) if organization else None,
        token=access_token,
        refresh_token=refresh_token,
    )


class RegisterUseCase(CommandUseCase):
    """Create an organization with its first admin user, then sign them in."""

    def __init__(self, session, passwords: PasswordHasher, tokens: TokenCodec):
        super().__init__(session)
        self.passwords = passwords
        self.issuer = TokenIssuer(tokens)
        self.users = SQLAlchemyUserRepository(session)
        self.organizations = SQLAlchemyOrganizationRepository(session)

    async def _execute(self, request: RegisterRequestDTO, client: ClientInfo) -> AuthResponseDTO:
        if self.users.exists_by_email(request.email):
            raise ValidationError("Email already in use", "email")

        # Organization and admin are created in one transaction
        organization = self.organizations.create(request.organization_name)
        user = self.users.create(
            email=request.email,
            password_hash=self.passwords.hash(request.password),
            first_name=request.first_name,
            last_name=request.last_name,
            role=UserRole.ADMIN,
            organization_id=organization.id,
        )
        access_token, refresh_token = self.issuer.issue(SessionStore(self.session), user, client)
        self.commit()

        logger.info(f"Registered organization {organization.id} with admin {user.id}")
        return _auth_response(user, organization, access_token, refresh_token)


class LoginUseCase(CommandUseCase):
    """Verify credentials and open a session."""

    def __init__(self, session, passwords: PasswordHasher, tokens: TokenCodec):
        super().__init__(session)
        self.passwords = passwords
        self.issuer = TokenIssuer(tokens)
        self.users = SQLAlchemyUserRepository(session)

    async def _execute(self, request: LoginRequestDTO, client: ClientInfo) -> AuthResponseDTO:
        user = self.users.get_by_email(request.email)

        # Same message for unknown email, wrong password and deactivated account
        if not user or not self.passwords.verify(request.password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not user.is_active:
            raise UnauthorizedError(INVALID_CREDENTIALS)

        user.last_login_at = utcnow()
        access_token, refresh_token = self.issuer.issue(SessionStore(self.session), user, client)
        self.commit()

        return _auth_response(user, user.organization, access_token, refresh_token)


class RefreshTokenUseCase(CommandUseCase):
    """Exchange a refresh token for a new pair; the old refresh token is revoked."""

    def __init__(self, session, tokens: TokenCodec, revocations: RevocationList):
        super().__init__(session)
        self.tokens = tokens
        self.revocations = revocations
        self.issuer = TokenIssuer(tokens)
        self.users = SQLAlchemyUserRepository(session)

    async def _execute(self, refresh_token: Optional[str], client: ClientInfo) -> AuthResponseDTO:
        if not refresh_token:
            raise UnauthorizedError("Refresh token not found")

        if await self.revocations.is_blacklisted(refresh_token):
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        payload = self.tokens.verify(refresh_token)
        if not payload or not payload.get("id"):
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        user = self.users.get_by_id(payload["id"])
        if not user or not user.is_active:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        access_token, new_refresh_token = self.issuer.issue(SessionStore(self.session), user, client)
        self.commit()

        await self.revocations.blacklist(refresh_token, self.tokens.remaining_lifetime(refresh_token))
        return _auth_response(user, user.organization, access_token, new_refresh_token)


class LogoutUseCase:
    """Revoke the presented tokens for the rest of their lifetimes."""

    def __init__(self, tokens: TokenCodec, revocations: RevocationList):
        self.tokens = tokens
        self.revocations = revocations

    async def execute(self, access_token: Optional[str], refresh_token: Optional[str]) -> int:
        revoked = 0
        for token in (access_token, refresh_token):
            if not token:
                continue
            ttl = self.tokens.remaining_lifetime(token)
            if ttl > 0:
                await self.revocations.blacklist(token, ttl)
                revoked += 1
        return revoked


class GetCurrentUserUseCase(QueryUseCase):
    """Profile of the authenticated caller."""

    async def _execute(self, current_user: AuthContext) -> UserResponseDTO:
        user = SQLAlchemyUserRepository(self.session).get_by_id(current_user.id)
        if not user:
            raise EntityNotFoundError("User", current_user.id)
        return UserResponseDTO.model_validate(user)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


class ForgotPasswordUseCase(CommandUseCase):
    """
    Create a short-lived password reset token.
    Unknown emails are ignored silently so the endpoint does not reveal accounts.
    """

    def __init__(self, session, expire_minutes: int = 10):
        super().__init__(session)
        self.expire_minutes = expire_minutes
        self.users = SQLAlchemyUserRepository(session)

    async def _execute(self, email: str) -> Optional[str]:
        user = self.users.get_by_email(email)
        if not user or not user.is_active:
            return None

        reset_token = secrets.token_hex(32)
        user.password_reset_token = hash_reset_token(reset_token)
        user.password_reset_expires = utcnow() + timedelta(minutes=self.expire_minutes)
        self.commit()

        # E-mail delivery is not wired up; the token is only surfaced in logs outside production
        logger.info(f"Password reset requested for user {user.id}")
        return reset_token


class ResetPasswordUseCase(CommandUseCase):
    """Set a new password from a valid reset token."""

    def __init__(self, session, passwords: PasswordHasher):
        super().__init__(session)
        self.passwords = passwords
        self.users = SQLAlchemyUserRepository(session)

    async def _execute(self, token: str, request: ResetPasswordRequestDTO) -> None:
        user = self.users.get_by_reset_token(hash_reset_token(token), utcnow())
        if not user:
            raise ValidationError("Token is invalid or has expired", "token")

        user.password_hash = self.passwords.hash(request.password)
        user.password_reset_token = None
        user.password_reset_expires = None
        self.commit()
        logger.info(f"Password reset completed for user {user.id}")
