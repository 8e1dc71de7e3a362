"""
Activity Logging Service
Audit trail for role changes, award operations and participant removal
"""

import json
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from app.database import database
from app.services.result import gateway_operation

logger = logging.getLogger(__name__)


class ActivityLogService:
    """Service for activity logging operations"""

    @staticmethod
    async def log_activity(
        actor_id: Optional[UUID],
        action: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[UUID] = None,
        details: Optional[dict] = None
    ) -> Optional[dict]:
        """
        Record an activity

        Args:
            actor_id: Profile that performed the action
            action: Action type (e.g. 'promote_user', 'issue_awards')
            resource_type: Type of resource affected (e.g. 'profile', 'workshop')
            resource_id: ID of the resource
            details: Additional JSON details

        Returns:
            Created entry, or None when it could not be written.
            Logging never fails the caller's workflow.
        """
        result = await ActivityLogService._insert(actor_id, action, resource_type, resource_id, details)
        if result.is_error:
            logger.error("Activity log entry %s was not recorded: %s", action, result.error.message)
        return result.value_or(None)

    @staticmethod
    @gateway_operation("activity_logs.insert")
    async def _insert(actor_id, action, resource_type, resource_id, details) -> Optional[dict]:
        row = await database.fetch_one(
            """
            INSERT INTO activity_logs (id, actor_id, action, resource_type, resource_id, details)
            VALUES (:id, :actor_id, :action, :resource_type, :resource_id, :details)
            RETURNING id, actor_id, action, resource_type, resource_id, details, created_at
            """,
            {
                "id": str(uuid.uuid4()),
                "actor_id": str(actor_id) if actor_id else None,
                "action": action,
                "resource_type": resource_type,
                "resource_id": str(resource_id) if resource_id else None,
                "details": json.dumps(details, default=str) if details else None
            }
        )
        return dict(row) if row else None

    @staticmethod
    @gateway_operation("activity_logs.list")
    async def list_activity_logs(
        limit: int = 50,
        offset: int = 0,
        action_filter: Optional[str] = None,
        days: int = 30
    ) -> Tuple[List[dict], int]:
        """
        Recent activity, newest first

        Returns:
            Tuple of (activity logs list, total count)
        """
        since = datetime.now(timezone.utc) - timedelta(days=days)

        where_clause = "created_at >= :since"
        params = {"since": since}

        if action_filter:
            where_clause += " AND action = :action"
            params["action"] = action_filter

        total = await database.fetch_val(
            f"SELECT COUNT(*) FROM activity_logs WHERE {where_clause}", params
        )

        logs = await database.fetch_all(
            f"""
            SELECT id, actor_id, action, resource_type, resource_id, details, created_at
            FROM activity_logs
            WHERE {where_clause}
            ORDER BY created_at DESC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": offset}
        )

        return [dict(log) for log in logs], total or 0
