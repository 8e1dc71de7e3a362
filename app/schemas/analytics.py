"""
Analytics Response Models
"""

from pydantic import BaseModel
from typing import Optional, List
from app.schemas.common import Organization


class OrganizationEngagement(BaseModel):
    """Engagement figures for one organization"""
    name: Organization
    workshops: int
    announcements: int
    participants: int
    score: int


class PlatformAnalytics(BaseModel):
    per_org: List[OrganizationEngagement]
    ranking: List[OrganizationEngagement]
    most_active: Optional[OrganizationEngagement] = None
    total_awards: int
    new_members: int


class TrendPoint(BaseModel):
    x: float
    y: float
    title: str
    count: int
    org: Organization


class AttendanceTrend(BaseModel):
    points: List[TrendPoint]
    path_data: str
    area_path: str
    width: int
    height: int
    padding: int
    max_attendance: int


class AttendanceTrendResponse(BaseModel):
    """Trend chart, or an explicit empty state"""
    available: bool
    message: Optional[str] = None
    trend: Optional[AttendanceTrend] = None


class OrganizationStats(BaseModel):
    organization: Organization
    workshop_count: int
    post_count: int
    participant_total: int
    avg_attendance: float
