"""
Workshop Models
Sessions hosted by organizations, their participants and comments
"""

from sqlalchemy import Column, String, Integer, DateTime, Text, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from app.database import Base


class Workshop(Base):
    __tablename__ = "workshops"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    organization = Column(String(10), nullable=False, index=True)

    # Assets
    banner_url = Column(String, nullable=True)
    badge_url = Column(String, nullable=True)
    certificate_url = Column(String, nullable=True)

    participant_limit = Column(Integer, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class WorkshopParticipant(Base):
    __tablename__ = "workshop_participants"
    __table_args__ = (
        UniqueConstraint("workshop_id", "user_id", name="uq_workshop_participants_workshop_user"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    workshop = relationship("Workshop", backref="participations")
    profile = relationship("Profile", backref="participations")


class WorkshopComment(Base):
    __tablename__ = "comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="SET NULL"), nullable=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    workshop = relationship("Workshop", backref="comments")
