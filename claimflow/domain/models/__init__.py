"""
Domain models for the claim management system.
This module exports enums, value objects and domain exceptions.
"""

from .base import (
    DomainException,
    ValidationError,
    BusinessRuleViolation,
    EntityNotFoundError,
    DuplicateEntityError,
    UnauthorizedError,
    ForbiddenError,
    RateLimitExceededError,
    ServiceUnavailableError,
)
from .user import UserRole, AuthContext
from .claim import ClaimStatus, ClaimPriority, ClaimActionType, DenialAnalysis
from .notification import NotificationType, JobStatus

__all__ = [
    "DomainException",
    "ValidationError",
    "BusinessRuleViolation",
    "EntityNotFoundError",
    "DuplicateEntityError",
    "UnauthorizedError",
    "ForbiddenError",
    "RateLimitExceededError",
    "ServiceUnavailableError",
    "UserRole",
    "AuthContext",
    "ClaimStatus",
    "ClaimPriority",
    "ClaimActionType",
    "DenialAnalysis",
    "NotificationType",
    "JobStatus",
]
