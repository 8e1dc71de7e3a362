"""
Announcement Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from app.schemas.common import Organization, Role


class AnnouncementComment(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    user_name: str = "Unknown"
    user_avatar: Optional[str] = None
    content: str
    created_at: datetime


class Announcement(BaseModel):
    """Feed post with likes and comments"""
    id: UUID
    title: str
    content: str
    image_url: Optional[str] = None
    organization: Organization = Organization.GENERAL
    author_id: Optional[UUID] = None
    author_name: str = "Unknown"
    author_role: Role = Role.MEMBER
    author_avatar: Optional[str] = None
    created_at: datetime
    likes: List[UUID] = Field(default_factory=list)
    comments: List[AnnouncementComment] = Field(default_factory=list)


class AnnouncementListResponse(BaseModel):
    total: int
    announcements: List[Announcement]


class AnnouncementData(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    organization: Organization = Organization.GENERAL
    image_url: Optional[str] = None


class LikeToggleResponse(BaseModel):
    announcement_id: UUID
    liked: bool
