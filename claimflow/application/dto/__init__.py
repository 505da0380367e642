"""
Application layer DTOs.
Data Transfer Objects for API requests and responses.
"""

from .base_dto import (
    BaseDTO,
    RequestDTO,
    ResponseDTO,
    ListRequestDTO,
    DateRangeMixin,
    PaginationMetaDTO,
)
from .user_dto import (
    RegisterRequestDTO,
    LoginRequestDTO,
    RefreshRequestDTO,
    ForgotPasswordRequestDTO,
    ResetPasswordRequestDTO,
    CreateUserRequestDTO,
    UpdateUserRequestDTO,
    ListUsersRequestDTO,
    OrganizationResponseDTO,
    UserResponseDTO,
    AuthResponseDTO,
    CreatedUserResponseDTO,
)
from .claim_dto import (
    CreateClaimRequestDTO,
    UpdateClaimRequestDTO,
    AssignClaimRequestDTO,
    ListClaimsRequestDTO,
    ClaimActionResponseDTO,
    ClaimResponseDTO,
    ClaimDetailResponseDTO,
)
from .notification_dto import ListNotificationsRequestDTO, NotificationResponseDTO
from .ai_dto import (
    BatchAnalyzeRequestDTO,
    AppealLetterRequestDTO,
    DenialAnalysisResponseDTO,
    AppealLetterResponseDTO,
    JobResponseDTO,
)
from .file_dto import FileResponseDTO

__all__ = [
    # Base DTOs
    "BaseDTO",
    "RequestDTO",
    "ResponseDTO",
    "ListRequestDTO",
    "DateRangeMixin",
    "PaginationMetaDTO",

    # User DTOs
    "RegisterRequestDTO",
    "LoginRequestDTO",
    "RefreshRequestDTO",
    "ForgotPasswordRequestDTO",
    "ResetPasswordRequestDTO",
    "CreateUserRequestDTO",
    "UpdateUserRequestDTO",
    "ListUsersRequestDTO",
    "OrganizationResponseDTO",
    "UserResponseDTO",
    "AuthResponseDTO",
    "CreatedUserResponseDTO",

    # Claim DTOs
    "CreateClaimRequestDTO",
    "UpdateClaimRequestDTO",
    "AssignClaimRequestDTO",
    "ListClaimsRequestDTO",
    "ClaimActionResponseDTO",
    "ClaimResponseDTO",
    "ClaimDetailResponseDTO",

    # Notification DTOs
    "ListNotificationsRequestDTO",
    "NotificationResponseDTO",

    # Analysis DTOs
    "BatchAnalyzeRequestDTO",
    "AppealLetterRequestDTO",
    "DenialAnalysisResponseDTO",
    "AppealLetterResponseDTO",
    "JobResponseDTO",

    # File DTOs
    "FileResponseDTO",
]
