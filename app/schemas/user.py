"""
User Request/Response Models
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from app.schemas.common import Role, Organization
from app.schemas.award import Badge, Certificate
from app.schemas.notification import Notification


class User(BaseModel):
    """Profile with owned collections"""
    id: UUID
    name: str
    email: str
    role: Role = Role.MEMBER
    officer_org: Optional[Organization] = None
    avatar_url: Optional[str] = None
    created_at: datetime
    badges: List[Badge] = Field(default_factory=list)
    certificates: List[Certificate] = Field(default_factory=list)
    notifications: List[Notification] = Field(default_factory=list)
    incomplete_sections: List[str] = Field(
        default_factory=list,
        description="Owned collections that could not be loaded"
    )


class UserListResponse(BaseModel):
    total: int
    users: List[User]


class SignupRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=8)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    status: str
    message: str
    access_token: str
    token_type: str = "bearer"
    user_id: UUID
    role: Role


class UpdateOfficerOrgRequest(BaseModel):
    organization: Organization


class RoleChangeResponse(BaseModel):
    """Outcome of a promote/demote request"""
    changed: bool
    message: str
    user_id: UUID
    role: Role
    officer_org: Optional[Organization] = None
    notified: bool = False
