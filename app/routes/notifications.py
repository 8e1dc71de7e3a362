"""
Notification Routes
Inbox of the signed-in user
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from app.auth import get_current_user
from app.schemas.user import User
from app.schemas.notification import NotificationListResponse
from app.services.notification_service import notification_service

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(current_user: User = Depends(get_current_user)):
    """Newest first, with the unread count"""
    notifications = (await notification_service.list_notifications(current_user.id)).unwrap_or([])
    return NotificationListResponse(
        total=len(notifications),
        unread=sum(1 for n in notifications if not n.read),
        notifications=notifications
    )


@router.post("/{notification_id}/read")
async def mark_read(notification_id: UUID, current_user: User = Depends(get_current_user)):
    (await notification_service.mark_read(notification_id, current_user.id)).unwrap("Notification not found")
    return {"status": "success", "notification_id": str(notification_id)}


@router.post("/read-all")
async def mark_all_read(current_user: User = Depends(get_current_user)):
    updated = (await notification_service.mark_all_read(current_user.id)).unwrap_or(0)
    return {"status": "success", "updated": updated}
