"""
Pydantic schemas for request/response validation
"""

from app.schemas.common import Role, Organization, NotificationType, ORGANIZATIONS
from app.schemas.user import User
from app.schemas.workshop import Workshop, Participant, Comment
from app.schemas.announcement import Announcement, AnnouncementComment
from app.schemas.award import Badge, Certificate
from app.schemas.notification import Notification

__all__ = [
    "Role",
    "Organization",
    "NotificationType",
    "ORGANIZATIONS",
    "User",
    "Workshop",
    "Participant",
    "Comment",
    "Announcement",
    "AnnouncementComment",
    "Badge",
    "Certificate",
    "Notification",
]
