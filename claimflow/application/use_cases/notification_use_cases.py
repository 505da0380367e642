"""
Notification use cases.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from claimflow.application.dto.base_dto import PaginationMetaDTO
from claimflow.application.dto.notification_dto import (
    ListNotificationsRequestDTO, NotificationResponseDTO
)
from claimflow.application.use_cases.base_use_case import CommandUseCase, QueryUseCase
from claimflow.domain.models.base import EntityNotFoundError
from claimflow.domain.models.notification import NotificationType
from claimflow.domain.models.user import AuthContext
from claimflow.infrastructure.db.models import NotificationModel, utcnow
from claimflow.infrastructure.realtime.hub import NotificationHub
from claimflow.infrastructure.repositories.notification_repository import SQLAlchemyNotificationRepository

logger = logging.getLogger(__name__)

NOTIFICATION_EVENT = "notification:new"


class NotificationPublisher:
    """
    Persists notifications inside the caller's transaction and pushes them
    to connected clients once that transaction has committed.
    """

    def __init__(self, session, hub: NotificationHub):
        self.repository = SQLAlchemyNotificationRepository(session)
        self.hub = hub
        self._pending: List[NotificationModel] = []

    def create(
        self,
        user_id: str,
        organization_id: str,
        title: str,
        message: str,
        related_claim_id: Optional[str] = None,
        action_url: Optional[str] = None,
        type: NotificationType = NotificationType.IN_APP
    ) -> NotificationModel:
        notification = self.repository.create(
            user_id=user_id,
            organization_id=organization_id,
            title=title,
            message=message,
            type=type,
            related_claim_id=related_claim_id,
            action_url=action_url,
        )
        self._pending.append(notification)
        return notification

    async def flush(self) -> int:
        """Emit every notification created since the last flush."""
        delivered = 0
        pending, self._pending = self._pending, []
        for notification in pending:
            data = NotificationResponseDTO.model_validate(notification).to_json_dict()
            delivered += await self.hub.emit_to_user(notification.user_id, NOTIFICATION_EVENT, data)
        return delivered


class ListNotificationsUseCase(QueryUseCase):
    """Page through the caller's notifications with the unread counter."""

    async def _execute(
        self,
        current_user: AuthContext,
        request: ListNotificationsRequestDTO
    ) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        repository = SQLAlchemyNotificationRepository(self.session)
        items, total = repository.list_for_user(
            current_user.id,
            is_read=request.is_read,
            type=request.type,
            offset=request.offset,
            limit=request.limit,
        )
        meta = PaginationMetaDTO.create(total, request.page, request.limit).to_json_dict()
        meta["unreadCount"] = repository.unread_count(current_user.id)
        data = [NotificationResponseDTO.model_validate(item).to_json_dict() for item in items]
        return data, meta


class MarkNotificationReadUseCase(CommandUseCase):

    async def _execute(self, current_user: AuthContext, notification_id: str) -> NotificationResponseDTO:
        notification = SQLAlchemyNotificationRepository(self.session).get_for_user(
            notification_id, current_user.id
        )
        if not notification:
            raise EntityNotFoundError("Notification", notification_id)

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = utcnow()
            self.commit()
        return NotificationResponseDTO.model_validate(notification)


class MarkAllNotificationsReadUseCase(CommandUseCase):

    async def _execute(self, current_user: AuthContext) -> int:
        updated = SQLAlchemyNotificationRepository(self.session).mark_all_read(current_user.id, utcnow())
        self.commit()
        return updated


class DeleteNotificationUseCase(CommandUseCase):

    async def _execute(self, current_user: AuthContext, notification_id: str) -> None:
        repository = SQLAlchemyNotificationRepository(self.session)
        notification = repository.get_for_user(notification_id, current_user.id)
        if not notification:
            raise EntityNotFoundError("Notification", notification_id)
        repository.delete(notification)
        self.commit()
