"""
Authentication dependencies for FastAPI.
Provides the authenticated caller and role-based authorization checks.
"""

from typing import Annotated, Iterable, Optional, Tuple

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from claimflow.domain.models.base import ForbiddenError, UnauthorizedError
from claimflow.domain.models.user import AuthContext, UserRole
from claimflow.infrastructure.container import ServiceContainer, get_container
from claimflow.infrastructure.db.database import get_db
from claimflow.infrastructure.web.cookies import ACCESS_COOKIE


def extract_token(request: Request) -> Optional[str]:
    """
    Extract the access token from the request.
    The Authorization header wins over the ``token`` cookie.
    """
    auth_header = request.headers.get("authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()  # Remove "Bearer " prefix
        if token:
            return token

    return request.cookies.get(ACCESS_COOKIE) or None


async def get_current_user(
    request: Request,
    container: Annotated[ServiceContainer, Depends(get_container)],
    db: Annotated[Session, Depends(get_db)]
) -> AuthContext:
    """
    FastAPI dependency returning the authenticated caller.

    Raises:
        UnauthorizedError: Translated to 401 (with cookies cleared) by the error handler
    """
    return await container.authenticator.authenticate(extract_token(request), db)


CurrentUser = Annotated[AuthContext, Depends(get_current_user)]


def authorize(context: Optional[AuthContext], allowed_roles: Iterable[UserRole]) -> AuthContext:
    """
    Check a caller against an allow-list of roles.

    Args:
        context: Authenticated caller, or None when authentication did not run
        allowed_roles: Roles permitted on the route

    Returns:
        The same context when allowed

    Raises:
        UnauthorizedError: No caller ("Not authenticated")
        ForbiddenError: Role not in the allow-list ("Insufficient permissions")
    """
    if context is None:
        raise UnauthorizedError("Not authenticated")
    if context.role not in tuple(allowed_roles):
        raise ForbiddenError("Insufficient permissions")
    return context


class RoleChecker:
    """Dependency class to check organization-level roles."""

    def __init__(self, allowed_roles: Iterable[UserRole]):
        self.allowed_roles: Tuple[UserRole, ...] = tuple(allowed_roles)

    async def __call__(self, user: CurrentUser) -> AuthContext:
        return authorize(user, self.allowed_roles)


def require_roles(*roles: UserRole) -> RoleChecker:
    """
    Dependency factory for role checking.

    Usage:
        @router.get("/users")
        async def list_users(user: Annotated[AuthContext, Depends(require_roles(UserRole.ADMIN))]):
            ...
    """
    return RoleChecker(roles)


# Pre-configured dependencies for common use cases
require_admin = require_roles(UserRole.ADMIN)
require_admin_or_manager = require_roles(UserRole.ADMIN, UserRole.MANAGER)

AdminUser = Annotated[AuthContext, Depends(require_admin)]
ManagerUser = Annotated[AuthContext, Depends(require_admin_or_manager)]
