"""
Analytics Routes
Platform dashboard, attendance trend and organization hub statistics
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends

from app.auth import get_current_user, require_admin
from app.schemas.common import Organization
from app.schemas.user import User
from app.schemas.analytics import PlatformAnalytics, AttendanceTrendResponse, OrganizationStats
from app.services.analytics_service import analytics_service
from app.services.announcement_service import announcement_service
from app.services.profile_service import profile_service
from app.services.workshop_service import workshop_service

router = APIRouter()


async def load_content():
    workshops, announcements = await asyncio.gather(
        workshop_service.list_workshops(),
        announcement_service.list_announcements(),
    )
    return workshops.unwrap_or([]), announcements.unwrap_or([])


@router.get("/platform", response_model=PlatformAnalytics)
async def platform_analytics(current_admin: User = Depends(require_admin)):
    """
    Engagement per organization, ranking, awards and new members (Admin only)
    """
    workshops, announcements = await load_content()
    users = (await profile_service.list_users()).unwrap_or([])
    return analytics_service.platform_analytics(workshops, announcements, users)


@router.get("/attendance-trend", response_model=AttendanceTrendResponse)
async def attendance_trend(
    organization: Optional[Organization] = None,
    current_user: User = Depends(get_current_user)
):
    """Attendance of the last eight workshops, as chart geometry"""
    workshops = (await workshop_service.list_workshops()).unwrap_or([])
    trend = analytics_service.attendance_trend(workshops, organization)
    if trend is None:
        return AttendanceTrendResponse(available=False, message="Not enough data to show a trend yet.")
    return AttendanceTrendResponse(available=True, trend=trend)


@router.get("/organizations/{organization}", response_model=OrganizationStats)
async def organization_stats(organization: Organization, current_user: User = Depends(get_current_user)):
    workshops, announcements = await load_content()
    return analytics_service.organization_stats(organization, workshops, announcements)
