"""
User DTOs for the application layer.
Data Transfer Objects for authentication and user management.
"""

from typing import Optional
from datetime import datetime

from pydantic import Field, EmailStr, field_validator

from claimflow.domain.models.user import UserRole
from .base_dto import RequestDTO, ResponseDTO, ListRequestDTO


def _check_password_strength(v: str) -> str:
    if not any(c.isdigit() for c in v):
        raise ValueError('Password must contain at least one digit')
    if not any(c.isalpha() for c in v):
        raise ValueError('Password must contain at least one letter')
    return v


# Request DTOs
class RegisterRequestDTO(RequestDTO):
    """DTO for organization + admin registration."""

    email: EmailStr = Field(description="User email address")
    password: str = Field(min_length=8, max_length=100, description="Password")
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    organization_name: str = Field(min_length=1, max_length=255)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        """Validate password strength."""
        return _check_password_strength(v)


class LoginRequestDTO(RequestDTO):
    """DTO for login requests."""

    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequestDTO(RequestDTO):
    """Refresh token in the body; the refreshToken cookie takes precedence."""

    refresh_token: Optional[str] = None


class ForgotPasswordRequestDTO(RequestDTO):
    email: EmailStr


class ResetPasswordRequestDTO(RequestDTO):
    password: str = Field(min_length=8, max_length=100)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return _check_password_strength(v)


class CreateUserRequestDTO(RequestDTO):
    """DTO for admin-created users."""

    email: EmailStr
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    role: UserRole = Field(default=UserRole.BILLER)


class UpdateUserRequestDTO(RequestDTO):
    """DTO for user update requests."""

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class ListUsersRequestDTO(ListRequestDTO):
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


# Response DTOs
class OrganizationResponseDTO(ResponseDTO):
    id: str
    name: str


class UserResponseDTO(ResponseDTO):
    """DTO for user responses. Never carries the password hash."""

    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    organization_id: str
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class AuthResponseDTO(ResponseDTO):
    """Token pair plus the authenticated user."""

    user: UserResponseDTO
    organization: Optional[OrganizationResponseDTO] = None
    token: str
    refresh_token: str


class CreatedUserResponseDTO(ResponseDTO):
    """New user and its one-time temporary password."""

    user: UserResponseDTO
    temporary_password: str
