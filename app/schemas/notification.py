"""
Notification Response Models
"""

from pydantic import BaseModel
from datetime import datetime
from uuid import UUID
from app.schemas.common import NotificationType


class Notification(BaseModel):
    """Inbox entry"""
    id: UUID
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    read: bool = False
    created_at: datetime


class NotificationListResponse(BaseModel):
    total: int
    unread: int
    notifications: list[Notification]
