"""
Profile Model
Community members, officers and admins
"""

from sqlalchemy import Column, String, DateTime, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID
import uuid
from app.database import Base


class Profile(Base):
    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("role IN ('MEMBER', 'OFFICER', 'ADMIN')", name="profiles_role_check"),
        CheckConstraint(
            "officer_org IS NULL OR officer_org IN ('CES', 'TCC', 'ICSO', 'GENERAL')",
            name="profiles_officer_org_check"
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # Role and officer scope
    role = Column(String(10), nullable=False, server_default="MEMBER")
    officer_org = Column(String(10), nullable=True)

    avatar_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
