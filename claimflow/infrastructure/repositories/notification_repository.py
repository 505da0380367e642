"""
Notification repository implementation using SQLAlchemy.
"""

from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy.orm import Session

from claimflow.domain.models.notification import NotificationType
from claimflow.infrastructure.db.models import NotificationModel


class SQLAlchemyNotificationRepository:
    """SQLAlchemy implementation of notification repository. Reads are scoped to one user."""

    def __init__(self, session: Session):
        self.session = session

    def create(
        self,
        user_id: str,
        organization_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.IN_APP,
        related_claim_id: Optional[str] = None,
        action_url: Optional[str] = None
    ) -> NotificationModel:
        model = NotificationModel(
            user_id=user_id,
            organization_id=organization_id,
            type=type,
            title=title,
            message=message,
            related_claim_id=related_claim_id,
            action_url=action_url,
        )
        self.session.add(model)
        self.session.flush()
        return model

    def get_for_user(self, notification_id: str, user_id: str) -> Optional[NotificationModel]:
        return self.session.query(NotificationModel).filter_by(
            id=notification_id,
            user_id=user_id
        ).first()

    def list_for_user(
        self,
        user_id: str,
        is_read: Optional[bool] = None,
        type: Optional[NotificationType] = None,
        offset: int = 0,
        limit: int = 20
    ) -> Tuple[List[NotificationModel], int]:
        query = self.session.query(NotificationModel).filter(NotificationModel.user_id == user_id)
        if is_read is not None:
            query = query.filter(NotificationModel.is_read.is_(is_read))
        if type is not None:
            query = query.filter(NotificationModel.type == type)

        total = query.order_by(None).count()
        items = (
            query.order_by(NotificationModel.created_at.desc(), NotificationModel.id)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    def unread_count(self, user_id: str) -> int:
        return self.session.query(NotificationModel).filter(
            NotificationModel.user_id == user_id,
            NotificationModel.is_read.is_(False),
        ).count()

    def mark_all_read(self, user_id: str, now: datetime) -> int:
        return (
            self.session.query(NotificationModel)
            .filter(NotificationModel.user_id == user_id, NotificationModel.is_read.is_(False))
            .update(
                {NotificationModel.is_read: True, NotificationModel.read_at: now},
                synchronize_session=False
            )
        )

    def delete(self, model: NotificationModel) -> None:
        self.session.delete(model)
        self.session.flush()
