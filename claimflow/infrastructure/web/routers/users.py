"""
User management router (organization admins only).
"""

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from claimflow.application.dto.user_dto import (
    CreateUserRequestDTO, UpdateUserRequestDTO, ListUsersRequestDTO
)
from claimflow.application.use_cases.user_use_cases import (
    ListUsersUseCase, CreateUserUseCase, UpdateUserUseCase, DeactivateUserUseCase
)
from claimflow.domain.models.user import UserRole
from claimflow.infrastructure.auth.dependencies import AdminUser
from claimflow.infrastructure.container import ServiceContainer, get_container
from claimflow.infrastructure.db.database import get_db
from claimflow.infrastructure.web.params import parse_query
from claimflow.infrastructure.web.responses import envelope


router = APIRouter()

DbSession = Annotated[Session, Depends(get_db)]


def list_users_params(
    page: int = Query(1),
    limit: int = Query(20),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
) -> ListUsersRequestDTO:
    return parse_query(ListUsersRequestDTO, page=page, limit=limit, role=role, is_active=is_active)


@router.get("")
async def list_users(
    current_user: AdminUser,
    params: Annotated[ListUsersRequestDTO, Depends(list_users_params)],
    db: DbSession
) -> Dict[str, Any]:
    """List users of the organization."""
    users, meta = await ListUsersUseCase(db).execute(current_user, params)
    return envelope(users, meta=meta)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequestDTO,
    current_user: AdminUser,
    container: Annotated[ServiceContainer, Depends(get_container)],
    db: DbSession
) -> Dict[str, Any]:
    """
    Create a user in the organization.
    The generated temporary password is only returned in this response.
    """
    created = await CreateUserUseCase(db, container.passwords).execute(current_user, request)
    return envelope(created, message="User created successfully")


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    request: UpdateUserRequestDTO,
    current_user: AdminUser,
    db: DbSession
) -> Dict[str, Any]:
    """Update names, role or active flag of a user."""
    user = await UpdateUserUseCase(db).execute(current_user, user_id, request)
    return envelope(user, message="User updated successfully")


@router.delete("/{user_id}")
async def deactivate_user(user_id: str, current_user: AdminUser, db: DbSession) -> Dict[str, Any]:
    """Deactivate a user; the account is kept for history."""
    await DeactivateUserUseCase(db).execute(current_user, user_id)
    return envelope(message="User deactivated successfully")
