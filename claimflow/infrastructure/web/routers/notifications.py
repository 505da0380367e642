"""
Notification router.
The caller only ever sees their own notifications.
"""

from typing import Annotated, Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from claimflow.application.dto.notification_dto import ListNotificationsRequestDTO
from claimflow.application.use_cases.notification_use_cases import (
    ListNotificationsUseCase, MarkNotificationReadUseCase,
    MarkAllNotificationsReadUseCase, DeleteNotificationUseCase
)
from claimflow.domain.models.notification import NotificationType
from claimflow.infrastructure.auth.dependencies import CurrentUser
from claimflow.infrastructure.db.database import get_db
from claimflow.infrastructure.web.params import parse_query
from claimflow.infrastructure.web.responses import envelope


router = APIRouter()

DbSession = Annotated[Session, Depends(get_db)]


def list_notifications_params(
    page: int = Query(1),
    limit: int = Query(20),
    is_read: Optional[bool] = Query(None, alias="isRead"),
    type: Optional[NotificationType] = Query(None),
) -> ListNotificationsRequestDTO:
    return parse_query(ListNotificationsRequestDTO, page=page, limit=limit, is_read=is_read, type=type)


@router.get("")
async def list_notifications(
    current_user: CurrentUser,
    params: Annotated[ListNotificationsRequestDTO, Depends(list_notifications_params)],
    db: DbSession
) -> Dict[str, Any]:
    """
    List notifications, newest first.

    - **isRead**: Filter read/unread
    - **type**: in_app, email or sms
    """
    notifications, meta = await ListNotificationsUseCase(db).execute(current_user, params)
    return envelope(notifications, meta=meta)


@router.put("/mark-all-read")
async def mark_all_read(current_user: CurrentUser, db: DbSession) -> Dict[str, Any]:
    updated = await MarkAllNotificationsReadUseCase(db).execute(current_user)
    return envelope({"updated": updated}, message="All notifications marked as read")


@router.put("/{notification_id}/read")
async def mark_as_read(notification_id: str, current_user: CurrentUser, db: DbSession) -> Dict[str, Any]:
    notification = await MarkNotificationReadUseCase(db).execute(current_user, notification_id)
    return envelope(notification)


@router.delete("/{notification_id}")
async def delete_notification(notification_id: str, current_user: CurrentUser, db: DbSession) -> Dict[str, Any]:
    await DeleteNotificationUseCase(db).execute(current_user, notification_id)
    return envelope(message="Notification deleted")
