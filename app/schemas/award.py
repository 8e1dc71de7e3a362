"""
Badge/Certificate Request/Response Models
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from app.schemas.common import Organization


class Badge(BaseModel):
    """Badge issued to a member"""
    id: UUID
    title: str
    organization: Organization
    workshop_id: Optional[UUID] = None
    workshop_title: str = ""
    issued_at: datetime
    image_url: Optional[str] = None


class Certificate(BaseModel):
    """Certificate issued to a member"""
    id: UUID
    title: str
    organization: Organization
    workshop_id: Optional[UUID] = None
    workshop_title: str = ""
    content: str = ""
    issued_at: datetime
    file_url: Optional[str] = None


class AwardSet(BaseModel):
    """Awards a member holds for one workshop"""
    badges: List[Badge] = Field(default_factory=list)
    certificates: List[Certificate] = Field(default_factory=list)


class AwardOutcome(BaseModel):
    """Result of one issue-awards workflow run"""
    user_id: UUID
    participant_name: Optional[str] = None
    status: str = Field(..., description="issued, already_issued, rolled_back, failed or skipped")
    completed_steps: List[str] = Field(default_factory=list)
    compensated_steps: List[str] = Field(default_factory=list)
    notified: bool = False
    error: Optional[str] = None


class BulkAwardRequest(BaseModel):
    """Participants selected for bulk issuance"""
    participant_ids: List[UUID] = Field(..., min_length=1)


class BulkAwardReport(BaseModel):
    """Per-participant outcomes of a bulk issuance"""
    workshop_id: UUID
    attempted: int
    issued: int
    already_issued: int
    failed: int
    skipped: int
    outcomes: List[AwardOutcome]


class RevokeAwardsResponse(BaseModel):
    user_id: UUID
    workshop_id: UUID
    badges_removed: int
    certificates_removed: int
