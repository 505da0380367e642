"""
User and organization repository implementations using SQLAlchemy.
"""

from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy.orm import Session
from sqlalchemy import func

from claimflow.domain.models.base import DuplicateEntityError
from claimflow.domain.models.user import UserRole
from claimflow.infrastructure.db.models import OrganizationModel, UserModel


class SQLAlchemyOrganizationRepository:
    """SQLAlchemy implementation of organization repository."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, name: str) -> OrganizationModel:
        model = OrganizationModel(name=name)
        self.session.add(model)
        self.session.flush()
        return model

    def get_by_id(self, organization_id: str) -> Optional[OrganizationModel]:
        return self.session.query(OrganizationModel).filter_by(id=organization_id).first()


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of user repository."""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: UserRole,
        organization_id: str
    ) -> UserModel:
        """Create a user. Emails are unique across organizations."""
        email = email.lower()
        if self.exists_by_email(email):
            raise DuplicateEntityError("User", "email", email)

        model = UserModel(
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            organization_id=organization_id,
            is_active=True,
        )
        self.session.add(model)
        self.session.flush()
        return model

    def get_by_id(self, user_id: str) -> Optional[UserModel]:
        """Get user by ID."""
        return self.session.query(UserModel).filter_by(id=user_id).first()

    def get_in_organization(self, user_id: str, organization_id: str) -> Optional[UserModel]:
        return self.session.query(UserModel).filter_by(
            id=user_id,
            organization_id=organization_id
        ).first()

    def get_by_email(self, email: str) -> Optional[UserModel]:
        """Get user by email."""
        return self.session.query(UserModel).filter_by(email=email.lower()).first()

    def get_by_reset_token(self, token_hash: str, now: datetime) -> Optional[UserModel]:
        return self.session.query(UserModel).filter(
            UserModel.password_reset_token == token_hash,
            UserModel.password_reset_expires > now,
        ).first()

    def exists_by_email(self, email: str) -> bool:
        """Check if user exists by email."""
        return self.session.query(
            self.session.query(UserModel).filter_by(email=email.lower()).exists()
        ).scalar()

    def list_by_organization(
        self,
        organization_id: str,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
        offset: int = 0,
        limit: int = 20
    ) -> Tuple[List[UserModel], int]:
        """List users of an organization with total count."""
        query = self.session.query(UserModel).filter_by(organization_id=organization_id)
        if role is not None:
            query = query.filter(UserModel.role == role)
        if is_active is not None:
            query = query.filter(UserModel.is_active.is_(is_active))

        total = query.order_by(None).count()
        users = (
            query.order_by(UserModel.created_at.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return users, total

    def count(self, organization_id: str) -> int:
        return self.session.query(func.count(UserModel.id)).filter(
            UserModel.organization_id == organization_id
        ).scalar()
