"""
Notification DTOs for the application layer.
"""

from typing import Optional
from datetime import datetime

from claimflow.domain.models.notification import NotificationType
from .base_dto import ResponseDTO, ListRequestDTO


class ListNotificationsRequestDTO(ListRequestDTO):
    is_read: Optional[bool] = None
    type: Optional[NotificationType] = None


class NotificationResponseDTO(ResponseDTO):
    id: str
    type: NotificationType
    title: str
    message: str
    related_claim_id: Optional[str] = None
    action_url: Optional[str] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
