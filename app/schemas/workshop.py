"""
Workshop Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from app.schemas.common import Organization


class Participant(BaseModel):
    """Denormalized snapshot of a registered user"""
    id: UUID
    name: str
    email: str
    avatar_url: Optional[str] = None


class Comment(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    user_name: str = "Unknown"
    user_avatar: Optional[str] = None
    content: str
    created_at: datetime


class Workshop(BaseModel):
    """Workshop with participants and comments"""
    id: UUID
    title: str
    description: str = ""
    date: datetime
    organization: Organization = Organization.GENERAL
    banner_url: Optional[str] = None
    badge_url: Optional[str] = None
    certificate_url: Optional[str] = None
    limit: int = Field(0, description="0 means unlimited")
    participants: List[Participant] = Field(default_factory=list)
    comments: List[Comment] = Field(default_factory=list)


class WorkshopListResponse(BaseModel):
    total: int
    workshops: List[Workshop]


class WorkshopData(BaseModel):
    """Fields written on create/update"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    date: datetime
    organization: Organization = Organization.GENERAL
    limit: int = Field(0, ge=0)
    banner_url: Optional[str] = None
    badge_url: Optional[str] = None
    certificate_url: Optional[str] = None


class CommentRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class JoinWorkshopResponse(BaseModel):
    status: str
    message: str
    workshop_id: UUID
    notified: bool
