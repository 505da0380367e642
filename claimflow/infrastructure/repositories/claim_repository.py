"""
Claim repository implementation using SQLAlchemy.
"""

from datetime import date
from typing import Optional, List, Tuple, Dict, Any

from sqlalchemy.orm import Session
from sqlalchemy import or_

from claimflow.domain.models.claim import ClaimStatus, ClaimPriority
from claimflow.infrastructure.db.models import ClaimModel, ClaimActionModel


class SQLAlchemyClaimRepository:
    """SQLAlchemy implementation of claim repository. All reads are organization-scoped."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, organization_id: str, data: Dict[str, Any]) -> ClaimModel:
        model = ClaimModel(organization_id=organization_id, **data)
        self.session.add(model)
        self.session.flush()
        return model

    def get_by_id(self, claim_id: str, organization_id: str) -> Optional[ClaimModel]:
        """Get a claim of the organization by ID."""
        return self.session.query(ClaimModel).filter_by(
            id=claim_id,
            organization_id=organization_id
        ).first()

    def get_many(self, claim_ids: List[str], organization_id: str) -> List[ClaimModel]:
        if not claim_ids:
            return []
        return self.session.query(ClaimModel).filter(
            ClaimModel.organization_id == organization_id,
            ClaimModel.id.in_(claim_ids),
        ).all()

    def list(
        self,
        organization_id: str,
        status: Optional[ClaimStatus] = None,
        priority: Optional[ClaimPriority] = None,
        assigned_to: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        offset: int = 0,
        limit: int = 20
    ) -> Tuple[List[ClaimModel], int]:
        """
        List claims with filters, newest first.

        Returns:
            Tuple of (claims on the page, total matching claims)
        """
        query = self.session.query(ClaimModel).filter(ClaimModel.organization_id == organization_id)

        if status is not None:
            query = query.filter(ClaimModel.status == status)
        if priority is not None:
            query = query.filter(ClaimModel.priority == priority)
        if assigned_to:
            query = query.filter(ClaimModel.assigned_to == assigned_to)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                ClaimModel.claim_number.ilike(pattern),
                ClaimModel.patient_name.ilike(pattern),
                ClaimModel.denial_reason.ilike(pattern),
            ))
        if date_from:
            query = query.filter(ClaimModel.date_of_service >= date_from)
        if date_to:
            query = query.filter(ClaimModel.date_of_service <= date_to)

        total = query.order_by(None).count()
        claims = (
            query.order_by(ClaimModel.created_at.desc(), ClaimModel.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return claims, total

    def add_action(
        self,
        claim_id: str,
        user_id: Optional[str],
        action_type: str,
        description: str
    ) -> ClaimActionModel:
        action = ClaimActionModel(
            claim_id=claim_id,
            user_id=user_id,
            action_type=action_type,
            description=description,
        )
        self.session.add(action)
        self.session.flush()
        return action

    def recent_actions(self, claim_id: str, limit: int = 10) -> List[ClaimActionModel]:
        return (
            self.session.query(ClaimActionModel)
            .filter_by(claim_id=claim_id)
            .order_by(ClaimActionModel.created_at.desc())
            .limit(limit)
            .all()
        )
