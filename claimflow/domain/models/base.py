"""
Domain exceptions shared by every layer.
The web layer translates them into HTTP responses; nothing below the
routers knows about status codes.
"""

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


class ValidationError(DomainException):
    """Exception raised when input or entity validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field


class BusinessRuleViolation(DomainException):
    """Exception raised when a business rule is violated."""

    def __init__(self, message: str):
        super().__init__(message, "BUSINESS_RULE_VIOLATION")


class EntityNotFoundError(DomainException):
    """Exception raised when an entity is not found."""

    def __init__(self, entity_type: str, entity_id: Any = None):
        message = f"{entity_type} not found"
        super().__init__(message, "ENTITY_NOT_FOUND")
        self.entity_type = entity_type
        self.entity_id = entity_id


class DuplicateEntityError(DomainException):
    """Exception raised when trying to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: Any, message: Optional[str] = None):
        message = message or f"{entity_type} with this {field} already exists"
        super().__init__(message, "DUPLICATE_ENTITY")
        self.entity_type = entity_type
        self.field = field
        self.value = value


class UnauthorizedError(DomainException):
    """Raised when the caller is not (or no longer) authenticated."""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message, "UNAUTHORIZED")


class ForbiddenError(DomainException):
    """Raised when an authenticated caller lacks the required role."""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, "FORBIDDEN")


class RateLimitExceededError(DomainException):
    """Raised when a client exceeds a request quota."""

    def __init__(self, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(message, "RATE_LIMIT_EXCEEDED")
        self.headers = headers or {}


class ServiceUnavailableError(DomainException):
    """Raised when a required backing service cannot be reached."""

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__(message, "SERVICE_UNAVAILABLE")
