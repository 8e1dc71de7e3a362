"""
Activity Log Routes
Audit trail of role changes, award operations and participant removals
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.auth import require_admin
from app.schemas.user import User
from app.schemas.activity_log import ActivityLogEntry, ActivityLogResponse
from app.services.activity_log_service import ActivityLogService

router = APIRouter()


@router.get("", response_model=ActivityLogResponse)
async def get_activity_logs(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(50, ge=1, le=500, description="Number of records to return"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    days: int = Query(30, ge=1, le=365, description="Number of days to include"),
    current_admin: User = Depends(require_admin)
):
    """
    Recent activity across the platform (Admin only)
    """
    logs, total = (await ActivityLogService.list_activity_logs(
        limit=limit,
        offset=skip,
        action_filter=action,
        days=days
    )).unwrap("No activity recorded")

    return ActivityLogResponse(
        logs=[ActivityLogEntry(**log) for log in logs],
        total=total,
        limit=limit,
        offset=skip,
        has_more=(skip + limit) < total
    )
