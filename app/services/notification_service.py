"""
Notification Service
Persistence gateway for user notifications
"""

import uuid
from typing import Optional
from uuid import UUID

from app.database import database
from app.schemas.common import NotificationType
from app.schemas.notification import Notification
from app.services.cache import entity_cache
from app.services.mappers import map_notification
from app.services.result import gateway_operation


class NotificationService:
    """Gateway operations for notifications"""

    @staticmethod
    @gateway_operation("notifications.send")
    async def send_notification(
        user_id: UUID,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO
    ) -> Notification:
        row = await database.fetch_one(
            """
            INSERT INTO notifications (id, user_id, title, message, type, is_read)
            VALUES (:id, :user_id, :title, :message, :type, FALSE)
            RETURNING *
            """,
            {
                "id": str(uuid.uuid4()),
                "user_id": str(user_id),
                "title": title,
                "message": message,
                "type": type.value
            }
        )
        entity_cache.invalidate_key("profiles", str(user_id))
        return map_notification(dict(row)) if row else None

    @staticmethod
    @gateway_operation("notifications.list")
    async def list_notifications(user_id: UUID) -> list:
        rows = await database.fetch_all(
            "SELECT * FROM notifications WHERE user_id = :user_id ORDER BY created_at DESC",
            {"user_id": str(user_id)}
        )
        return [map_notification(dict(row)) for row in rows]

    @staticmethod
    @gateway_operation("notifications.mark_read")
    async def mark_read(notification_id: UUID, user_id: UUID) -> Optional[UUID]:
        """Mark one of the user's notifications read"""
        row = await database.fetch_one(
            """
            UPDATE notifications SET is_read = TRUE
            WHERE id = :id AND user_id = :user_id
            RETURNING id
            """,
            {"id": str(notification_id), "user_id": str(user_id)}
        )
        entity_cache.invalidate_key("profiles", str(user_id))
        return row["id"] if row else None

    @staticmethod
    @gateway_operation("notifications.mark_all_read")
    async def mark_all_read(user_id: UUID) -> int:
        """Mark every unread notification of a user read; returns how many changed"""
        rows = await database.fetch_all(
            """
            UPDATE notifications SET is_read = TRUE
            WHERE user_id = :user_id AND is_read = FALSE
            RETURNING id
            """,
            {"user_id": str(user_id)}
        )
        entity_cache.invalidate_key("profiles", str(user_id))
        return len(rows)


# Create singleton instance
notification_service = NotificationService()
