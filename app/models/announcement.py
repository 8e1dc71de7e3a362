"""
Announcement Models
Organization feed posts, their likes and comments
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from app.database import Base


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    image_url = Column(String, nullable=True)
    organization = Column(String(10), nullable=False, index=True)

    # Author snapshot
    author_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    author_role = Column(String(10), server_default="MEMBER")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    author = relationship("Profile", backref="announcements")


class AnnouncementLike(Base):
    __tablename__ = "announcement_likes"
    __table_args__ = (
        UniqueConstraint("announcement_id", "user_id", name="uq_announcement_likes_announcement_user"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    announcement_id = Column(UUID(as_uuid=True), ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AnnouncementComment(Base):
    __tablename__ = "announcement_comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    announcement_id = Column(UUID(as_uuid=True), ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    announcement = relationship("Announcement", backref="comments")
