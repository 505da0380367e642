"""
User management use cases (organization admins only).
"""

import logging
from typing import Any, Dict, List, Tuple

from claimflow.application.dto.base_dto import PaginationMetaDTO
from claimflow.application.dto.user_dto import (
    CreateUserRequestDTO, UpdateUserRequestDTO, ListUsersRequestDTO,
    UserResponseDTO, CreatedUserResponseDTO
)
from claimflow.application.use_cases.base_use_case import CommandUseCase, QueryUseCase
from claimflow.domain.models.base import (
    BusinessRuleViolation, DuplicateEntityError, EntityNotFoundError, ValidationError
)
from claimflow.domain.models.user import AuthContext
from claimflow.infrastructure.auth.passwords import PasswordHasher
from claimflow.infrastructure.db.models import UserModel
from claimflow.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

logger = logging.getLogger(__name__)


def _get_user_or_404(repository: SQLAlchemyUserRepository, user_id: str, organization_id: str) -> UserModel:
    user = repository.get_in_organization(user_id, organization_id)
    if not user:
        raise EntityNotFoundError("User", user_id)
    return user


class ListUsersUseCase(QueryUseCase):

    async def _execute(
        self,
        current_user: AuthContext,
        request: ListUsersRequestDTO
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        users, total = SQLAlchemyUserRepository(self.session).list_by_organization(
            current_user.organization_id,
            role=request.role,
            is_active=request.is_active,
            offset=request.offset,
            limit=request.limit,
        )
        data = [UserResponseDTO.model_validate(user).to_json_dict() for user in users]
        meta = PaginationMetaDTO.create(total, request.page, request.limit).to_json_dict()
        return data, meta


class CreateUserUseCase(CommandUseCase):
    """Create a teammate with a generated temporary password, returned once."""

    def __init__(self, session, passwords: PasswordHasher):
        super().__init__(session)
        self.passwords = passwords

    async def _execute(self, current_user: AuthContext, request: CreateUserRequestDTO) -> CreatedUserResponseDTO:
        repository = SQLAlchemyUserRepository(self.session)
        if repository.exists_by_email(request.email):
            raise DuplicateEntityError(
                "User", "email", request.email,
                message="User with this email already exists"
            )

        temporary_password = self.passwords.generate_temporary_password()
        user = repository.create(
            email=request.email,
            password_hash=self.passwords.hash(temporary_password),
            first_name=request.first_name,
            last_name=request.last_name,
            role=request.role,
            organization_id=current_user.organization_id,
        )
        self.commit()

        logger.info(f"User {user.id} created by admin {current_user.id}")
        return CreatedUserResponseDTO(
            user=UserResponseDTO.model_validate(user),
            temporary_password=temporary_password,
        )


class UpdateUserUseCase(CommandUseCase):

    async def _execute(
        self,
        current_user: AuthContext,
        user_id: str,
        request: UpdateUserRequestDTO
    ) -> UserResponseDTO:
        user = _get_user_or_404(SQLAlchemyUserRepository(self.session), user_id, current_user.organization_id)

        changes = {k: v for k, v in request.model_dump(exclude_unset=True).items() if v is not None}
        if not changes:
            raise ValidationError("No fields to update")
        if user.id == current_user.id and (changes.get("is_active") is False or "role" in changes):
            raise BusinessRuleViolation("You cannot change your own role or deactivate yourself")

        for field, value in changes.items():
            setattr(user, field, value)
        self.commit()
        return UserResponseDTO.model_validate(user)


class DeactivateUserUseCase(CommandUseCase):
    """Soft-delete: the user keeps their history but can no longer sign in."""

    async def _execute(self, current_user: AuthContext, user_id: str) -> UserResponseDTO:
        user = _get_user_or_404(SQLAlchemyUserRepository(self.session), user_id, current_user.organization_id)
        if user.id == current_user.id:
            raise BusinessRuleViolation("You cannot deactivate your own account")

        user.is_active = False
        self.commit()

        logger.info(f"User {user.id} deactivated by admin {current_user.id}")
        return UserResponseDTO.model_validate(user)
