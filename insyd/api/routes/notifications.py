"""Inbox endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from insyd.api.dependencies import get_services
from insyd.api.schemas import (
    LegacyMarkReadRequest,
    MessageResponse,
    NotificationListResponse,
    NotificationOut,
    UserEmailRequest,
)
from insyd.services import Services

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    email: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=100),
    services: Services = Depends(get_services),
):
    """Most recent notifications for a user, newest first."""
    page = services.inbox.list(email, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationOut.from_domain(n) for n in page.notifications],
        unread=page.unread,
    )


@router.post("/{notification_id}/read", response_model=MessageResponse)
def mark_read(
    notification_id: str,
    body: Optional[UserEmailRequest] = None,
    services: Services = Depends(get_services),
):
    body = body or UserEmailRequest()
    services.inbox.mark_read(notification_id, body.user_email)
    return MessageResponse(message="Notification marked as read")


@router.patch("", response_model=MessageResponse)
def mark_read_legacy(
    body: Optional[LegacyMarkReadRequest] = None,
    services: Services = Depends(get_services),
):
    """Older clients send the id and email in the body."""
    body = body or LegacyMarkReadRequest()
    services.inbox.mark_read(body.notification_id, body.email)
    return MessageResponse(message="Notification marked as read")
