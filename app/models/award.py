"""
Award Models
Badges and certificates issued to members for completed workshops
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
import uuid
from app.database import Base


class Badge(Base):
    __tablename__ = "badges"
    __table_args__ = (
        UniqueConstraint("user_id", "workshop_id", name="uq_badges_user_workshop"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    organization = Column(String(10), nullable=False)
    workshop_title = Column(String(200), nullable=True)  # snapshot at issuance
    image_url = Column(String, nullable=True)
    issued_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("Profile", backref="badges")


class Certificate(Base):
    __tablename__ = "certificates"
    __table_args__ = (
        UniqueConstraint("user_id", "workshop_id", name="uq_certificates_user_workshop"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    workshop_id = Column(UUID(as_uuid=True), ForeignKey("workshops.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(255), nullable=False)
    organization = Column(String(10), nullable=False)
    workshop_title = Column(String(200), nullable=True)
    content = Column(Text, nullable=True)
    file_url = Column(String, nullable=True)
    issued_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("Profile", backref="certificates")
