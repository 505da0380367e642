"""
Repository implementations for the infrastructure layer.
"""

from .user_repository import SQLAlchemyOrganizationRepository, SQLAlchemyUserRepository
from .claim_repository import SQLAlchemyClaimRepository
from .notification_repository import SQLAlchemyNotificationRepository
from .file_repository import SQLAlchemyFileRepository

__all__ = [
    "SQLAlchemyOrganizationRepository",
    "SQLAlchemyUserRepository",
    "SQLAlchemyClaimRepository",
    "SQLAlchemyNotificationRepository",
    "SQLAlchemyFileRepository",
]
