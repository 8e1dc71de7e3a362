"""
Database Models
Import all models here for Alembic migrations
"""

from app.models.profile import Profile
from app.models.workshop import Workshop, WorkshopParticipant, WorkshopComment
from app.models.announcement import Announcement, AnnouncementLike, AnnouncementComment
from app.models.award import Badge, Certificate
from app.models.notification import Notification
from app.models.activity_log import ActivityLog

__all__ = [
    "Profile",
    "Workshop",
    "WorkshopParticipant",
    "WorkshopComment",
    "Announcement",
    "AnnouncementLike",
    "AnnouncementComment",
    "Badge",
    "Certificate",
    "Notification",
    "ActivityLog",
]
