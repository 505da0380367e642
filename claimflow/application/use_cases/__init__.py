"""
Application layer use cases.
Business logic for the claim denial management service.
"""

from .base_use_case import BaseUseCase, CommandUseCase, QueryUseCase
from .auth_use_cases import (
    ClientInfo,
    RegisterUseCase,
    LoginUseCase,
    RefreshTokenUseCase,
    LogoutUseCase,
    GetCurrentUserUseCase,
    ForgotPasswordUseCase,
    ResetPasswordUseCase,
)
from .claim_use_cases import (
    ListClaimsUseCase,
    GetClaimUseCase,
    CreateClaimUseCase,
    UpdateClaimUseCase,
    AssignClaimUseCase,
)
from .ai_use_cases import (
    BATCH_ANALYSIS_JOB,
    ClaimAnalyzer,
    AnalyzeClaimUseCase,
    StartBatchAnalysisUseCase,
    GetJobUseCase,
    GenerateAppealLetterUseCase,
    BatchAnalysisHandler,
)
from .notification_use_cases import (
    NotificationPublisher,
    ListNotificationsUseCase,
    MarkNotificationReadUseCase,
    MarkAllNotificationsReadUseCase,
    DeleteNotificationUseCase,
)
from .user_use_cases import (
    ListUsersUseCase,
    CreateUserUseCase,
    UpdateUserUseCase,
    DeactivateUserUseCase,
)
from .file_use_cases import (
    UploadFileUseCase,
    GetFileUseCase,
    DownloadFileUseCase,
    DeleteFileUseCase,
)

__all__ = [
    # Base Use Cases
    "BaseUseCase",
    "CommandUseCase",
    "QueryUseCase",

    # Auth Use Cases
    "ClientInfo",
    "RegisterUseCase",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "GetCurrentUserUseCase",
    "ForgotPasswordUseCase",
    "ResetPasswordUseCase",

    # Claim Use Cases
    "ListClaimsUseCase",
    "GetClaimUseCase",
    "CreateClaimUseCase",
    "UpdateClaimUseCase",
    "AssignClaimUseCase",

    # Analysis Use Cases
    "BATCH_ANALYSIS_JOB",
    "ClaimAnalyzer",
    "AnalyzeClaimUseCase",
    "StartBatchAnalysisUseCase",
    "GetJobUseCase",
    "GenerateAppealLetterUseCase",
    "BatchAnalysisHandler",

    # Notification Use Cases
    "NotificationPublisher",
    "ListNotificationsUseCase",
    "MarkNotificationReadUseCase",
    "MarkAllNotificationsReadUseCase",
    "DeleteNotificationUseCase",

    # User Use Cases
    "ListUsersUseCase",
    "CreateUserUseCase",
    "UpdateUserUseCase",
    "DeactivateUserUseCase",

    # File Use Cases
    "UploadFileUseCase",
    "GetFileUseCase",
    "DownloadFileUseCase",
    "DeleteFileUseCase",
]
