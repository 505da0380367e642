"""
Global error handling for the FastAPI application.
Every failure is translated into the ``{success: false, message, errors?}`` envelope.
"""

import logging
import traceback
from typing import Any, Dict, List, Optional, Tuple

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from claimflow.config import Settings
from claimflow.domain.models.base import (
    DomainException, ValidationError, BusinessRuleViolation, EntityNotFoundError,
    DuplicateEntityError, UnauthorizedError, ForbiddenError,
    RateLimitExceededError, ServiceUnavailableError
)
from claimflow.infrastructure.web.cookies import clear_auth_cookies

logger = logging.getLogger(__name__)

DOMAIN_STATUS_CODES = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (BusinessRuleViolation, status.HTTP_400_BAD_REQUEST),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (DuplicateEntityError, status.HTTP_409_CONFLICT),
    (RateLimitExceededError, status.HTTP_429_TOO_MANY_REQUESTS),
    (ServiceUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def _validation_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(location), "message": error.get("msg", "Invalid value")})
    return errors


class ErrorTranslator:
    """Maps exceptions to a status code and response envelope."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def translate(self, exc: Exception) -> Tuple[int, str, Optional[List[Dict[str, str]]]]:
        """
        Returns:
            Tuple of (status code, client-facing message, field errors or None)
        """
        if isinstance(exc, RequestValidationError):
            return status.HTTP_400_BAD_REQUEST, "Validation failed", _validation_errors(exc)

        if isinstance(exc, DomainException):
            for exc_type, status_code in DOMAIN_STATUS_CODES:
                if isinstance(exc, exc_type):
                    errors = None
                    if isinstance(exc, ValidationError) and exc.field:
                        errors = [{"field": exc.field, "message": exc.message}]
                    return status_code, exc.message, errors
            return status.HTTP_400_BAD_REQUEST, exc.message, None

        if isinstance(exc, StarletteHTTPException):
            return exc.status_code, str(exc.detail), None

        if isinstance(exc, IntegrityError):
            return status.HTTP_409_CONFLICT, "Resource already exists", None
        if isinstance(exc, SQLAlchemyError):
            return status.HTTP_400_BAD_REQUEST, "Database operation failed", None

        message = "Internal server error" if self.settings.is_production else (str(exc) or "Internal server error")
        return status.HTTP_500_INTERNAL_SERVER_ERROR, message, None

    def build_response(self, request: Request, exc: Exception) -> JSONResponse:
        status_code, message, errors = self.translate(exc)

        log_extra = {
            "request_path": request.url.path,
            "request_method": request.method,
            "status_code": status_code,
        }
        if status_code >= 500:
            logger.error(
                f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc}",
                exc_info=exc,
                extra=log_extra
            )
        else:
            logger.warning(f"{request.method} {request.url.path} -> {status_code}: {message}", extra=log_extra)

        content: Dict[str, Any] = {"success": False, "message": message}
        if errors:
            content["errors"] = errors

        if self.settings.debug and not self.settings.is_production:
            content["debug"] = {
                "exception_type": type(exc).__name__,
                "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
            }

        headers = None
        if isinstance(exc, RateLimitExceededError):
            headers = exc.headers
        elif isinstance(exc, StarletteHTTPException):
            headers = getattr(exc, "headers", None)

        response = JSONResponse(status_code=status_code, content=content, headers=headers)
        if status_code == status.HTTP_401_UNAUTHORIZED:
            clear_auth_cookies(response, self.settings)
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware to handle all uncaught exceptions and format error responses.
    """

    def __init__(self, app, translator: ErrorTranslator):
        super().__init__(app)
        self.translator = translator

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            return self.translator.build_response(request, exc)


def register_exception_handlers(app: FastAPI, translator: ErrorTranslator) -> None:
    """Route known exception types through the translator."""

    async def handle(request: Request, exc: Exception) -> JSONResponse:
        return translator.build_response(request, exc)

    for exc_type in (DomainException, RequestValidationError, StarletteHTTPException, SQLAlchemyError):
        app.add_exception_handler(exc_type, handle)
