"""
Entity Mapper
Translates raw backend rows into application entities
"""

import logging
from typing import Dict, Iterable, List, Optional

from app.schemas.common import Role, Organization, NotificationType
from app.schemas.user import User
from app.schemas.workshop import Workshop, Participant, Comment
from app.schemas.announcement import Announcement, AnnouncementComment
from app.schemas.award import Badge, Certificate
from app.schemas.notification import Notification
from app.services.result import GatewayResult

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown"

# store column -> entity field
PROFILE_FIELDS = {
    "id": "id",
    "name": "name",
    "email": "email",
    "role": "role",
    "officer_org": "officer_org",
    "avatar_url": "avatar_url",
    "created_at": "created_at",
}

WORKSHOP_FIELDS = {
    "id": "id",
    "title": "title",
    "description": "description",
    "date": "date",
    "organization": "organization",
    "banner_url": "banner_url",
    "badge_url": "badge_url",
    "certificate_url": "certificate_url",
    "participant_limit": "limit",
}

NOTIFICATION_FIELDS = {
    "id": "id",
    "title": "title",
    "message": "message",
    "type": "type",
    "is_read": "read",
    "created_at": "created_at",
}


def _translate(row: dict, table: Dict[str, str]) -> dict:
    return {field: row.get(column) for column, field in table.items()}


def _role(value: Optional[str], default: Role = Role.MEMBER) -> Role:
    try:
        return Role(value)
    except ValueError:
        return default


def _organization(value: Optional[str]) -> Organization:
    try:
        return Organization(value)
    except ValueError:
        return Organization.GENERAL


def _optional_organization(value: Optional[str]) -> Optional[Organization]:
    if not value:
        return None
    try:
        return Organization(value)
    except ValueError:
        return None


def map_badge(row: dict) -> Badge:
    return Badge(
        id=row["id"],
        title=row.get("title") or "",
        organization=_organization(row.get("organization")),
        workshop_id=row.get("workshop_id"),
        workshop_title=row.get("workshop_title") or "",
        issued_at=row["issued_at"],
        image_url=row.get("image_url"),
    )


def map_certificate(row: dict) -> Certificate:
    return Certificate(
        id=row["id"],
        title=row.get("title") or "",
        organization=_organization(row.get("organization")),
        workshop_id=row.get("workshop_id"),
        workshop_title=row.get("workshop_title") or "",
        content=row.get("content") or "",
        issued_at=row["issued_at"],
        file_url=row.get("file_url"),
    )


def map_notification(row: dict) -> Notification:
    fields = _translate(row, NOTIFICATION_FIELDS)
    try:
        fields["type"] = NotificationType(fields["type"])
    except ValueError:
        fields["type"] = NotificationType.INFO
    fields["read"] = bool(fields["read"])
    return Notification(**fields)


def _owned_collection(result: GatewayResult, mapper, section: str, profile_id, incomplete: List[str]) -> list:
    if result.is_error:
        logger.warning(
            "Could not load %s for profile %s: %s", section, profile_id, result.error.message
        )
        incomplete.append(section)
        return []
    return [mapper(row) for row in result.value_or([])]


def map_profile(
    profile: dict,
    badges: GatewayResult,
    certificates: GatewayResult,
    notifications: GatewayResult,
) -> User:
    """
    Build a User from a profile row and its three owned-collection fetches

    A failed fetch yields an empty collection and is named in
    incomplete_sections, so "no badges" and "badges unavailable" differ.
    """
    fields = _translate(profile, PROFILE_FIELDS)
    fields["role"] = _role(fields["role"])
    fields["officer_org"] = _optional_organization(fields["officer_org"])

    incomplete: List[str] = []
    fields["badges"] = _owned_collection(badges, map_badge, "badges", profile.get("id"), incomplete)
    fields["certificates"] = _owned_collection(
        certificates, map_certificate, "certificates", profile.get("id"), incomplete
    )
    fields["notifications"] = _owned_collection(
        notifications, map_notification, "notifications", profile.get("id"), incomplete
    )
    fields["incomplete_sections"] = incomplete
    return User(**fields)


def map_participant(row: dict) -> Optional[Participant]:
    if row.get("id") is None:
        return None
    return Participant(
        id=row["id"],
        name=row.get("name") or UNKNOWN_AUTHOR,
        email=row.get("email") or "",
        avatar_url=row.get("avatar_url"),
    )


def map_comment(row: dict) -> Comment:
    return Comment(
        id=row["id"],
        user_id=row.get("user_id"),
        user_name=row.get("author_name") or UNKNOWN_AUTHOR,
        user_avatar=row.get("author_avatar"),
        content=row.get("content") or "",
        created_at=row["created_at"],
    )


def map_workshop(row: dict, participant_rows: Iterable[dict] = (), comment_rows: Iterable[dict] = ()) -> Workshop:
    """Flatten a workshop row and its joined participants and comments"""
    fields = _translate(row, WORKSHOP_FIELDS)
    fields["description"] = fields["description"] or ""
    fields["organization"] = _organization(fields["organization"])
    fields["limit"] = fields["limit"] or 0
    participants = [map_participant(p) for p in participant_rows]
    fields["participants"] = [p for p in participants if p is not None]
    fields["comments"] = sorted((map_comment(c) for c in comment_rows), key=lambda c: c.created_at)
    return Workshop(**fields)


def map_announcement_comment(row: dict) -> AnnouncementComment:
    return AnnouncementComment(
        id=row["id"],
        user_id=row.get("user_id"),
        user_name=row.get("author_name") or UNKNOWN_AUTHOR,
        user_avatar=row.get("author_avatar"),
        content=row.get("content") or "",
        created_at=row["created_at"],
    )


def map_announcement(row: dict, like_rows: Iterable[dict] = (), comment_rows: Iterable[dict] = ()) -> Announcement:
    """Flatten an announcement row with its author snapshot, likes and comments"""
    author_role = row.get("author_current_role") or row.get("author_role")
    return Announcement(
        id=row["id"],
        title=row.get("title") or "",
        content=row.get("content") or "",
        image_url=row.get("image_url"),
        organization=_organization(row.get("organization")),
        author_id=row.get("author_id"),
        author_name=row.get("author_name") or UNKNOWN_AUTHOR,
        author_role=_role(author_role),
        author_avatar=row.get("author_avatar"),
        created_at=row["created_at"],
        likes=[like["user_id"] for like in like_rows if like.get("user_id") is not None],
        comments=sorted(
            (map_announcement_comment(c) for c in comment_rows), key=lambda c: c.created_at
        ),
    )


def group_by(rows: Iterable[dict], key: str) -> Dict[str, List[dict]]:
    """Group joined child rows by their parent id"""
    grouped: Dict[str, List[dict]] = {}
    for row in rows:
        grouped.setdefault(str(row[key]), []).append(row)
    return grouped
