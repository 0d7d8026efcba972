"""Notification endpoints."""

from fastapi import APIRouter, Depends, Query

from app.api.v1.dependencies import (
    get_notification_service,
    get_request_context,
    parse_id,
)
from app.schemas.common import MessageResponse
from app.schemas.notification import (
    NotificationListResponse,
    NotificationResponse,
    NotificationUpdate,
)
from app.services.context import RequestContext
from app.services.exceptions import InvalidInputError
from app.services.notification_service import NotificationService

router = APIRouter()


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List my notifications",
)
def list_notifications(
    unread_only: bool = Query(default=False, description="Only unread notifications"),
    ctx: RequestContext = Depends(get_request_context),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    notifications, unread_count = notification_service.list_for_user(ctx, unread_only)
    return NotificationListResponse(
        count=len(notifications),
        unread_count=unread_count,
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
    )


@router.get(
    "/{notification_id}",
    response_model=NotificationResponse,
    summary="Get one of my notifications",
)
def get_notification(
    notification_id: str,
    ctx: RequestContext = Depends(get_request_context),
    notification_service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    notification = notification_service.get_for_user(ctx, parse_id(notification_id, "Notification"))
    return NotificationResponse.model_validate(notification)


@router.put(
    "/{notification_id}",
    response_model=MessageResponse,
    summary="Mark a notification read or unread",
    description="Only the recipient may change a notification; admins included.",
)
def update_notification(
    notification_id: str,
    data: NotificationUpdate,
    ctx: RequestContext = Depends(get_request_context),
    notification_service: NotificationService = Depends(get_notification_service),
) -> MessageResponse:
    notification_id = parse_id(notification_id, "Notification")
    if data.is_read is None:
        raise InvalidInputError("is_read field is required")

    notification_service.set_read(ctx, notification_id, data.is_read)
    return MessageResponse(message="Notification updated successfully")
