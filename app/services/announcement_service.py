"""
Announcement Service
Persistence gateway for the announcements feed, likes and comments
"""

import uuid
from typing import Optional
from uuid import UUID

from app.database import database
from app.schemas.common import Organization, Role
from app.schemas.announcement import Announcement, AnnouncementData, AnnouncementComment
from app.services.cache import entity_cache, ALL
from app.services.mappers import map_announcement, map_announcement_comment, group_by
from app.services.result import gateway_operation

ANNOUNCEMENTS_QUERY = """
    SELECT a.id, a.title, a.content, a.image_url, a.organization, a.author_id,
           a.author_role, a.created_at,
           p.name AS author_name, p.avatar_url AS author_avatar, p.role AS author_current_role
    FROM announcements a
    LEFT JOIN profiles p ON p.id = a.author_id
"""

LIKES_QUERY = "SELECT announcement_id, user_id FROM announcement_likes"

COMMENTS_QUERY = """
    SELECT c.id, c.announcement_id, c.user_id, c.content, c.created_at,
           p.name AS author_name, p.avatar_url AS author_avatar
    FROM announcement_comments c
    LEFT JOIN profiles p ON p.id = c.user_id
"""


class AnnouncementService:
    """Gateway operations for announcements"""

    @staticmethod
    @gateway_operation("announcements.list")
    async def list_announcements(organization: Optional[Organization] = None) -> list:
        """Feed, newest first, optionally scoped to one organization"""
        cache_key = organization.value if organization else ALL
        cached = entity_cache.get("announcements", cache_key)
        if cached is not None:
            return cached
        generation = entity_cache.generation("announcements")

        if organization:
            rows = await database.fetch_all(
                f"{ANNOUNCEMENTS_QUERY} WHERE a.organization = :organization ORDER BY a.created_at DESC",
                {"organization": organization.value}
            )
        else:
            rows = await database.fetch_all(f"{ANNOUNCEMENTS_QUERY} ORDER BY a.created_at DESC")

        likes = group_by([dict(r) for r in await database.fetch_all(LIKES_QUERY)], "announcement_id")
        comments = group_by([dict(r) for r in await database.fetch_all(COMMENTS_QUERY)], "announcement_id")

        announcements = [
            map_announcement(dict(row), likes.get(str(row["id"]), []), comments.get(str(row["id"]), []))
            for row in rows
        ]
        entity_cache.set("announcements", cache_key, announcements, generation)
        return announcements

    @staticmethod
    @gateway_operation("announcements.get")
    async def get_announcement(announcement_id: UUID) -> Optional[Announcement]:
        params = {"announcement_id": str(announcement_id)}
        row = await database.fetch_one(f"{ANNOUNCEMENTS_QUERY} WHERE a.id = :announcement_id", params)
        if not row:
            return None
        likes = await database.fetch_all(f"{LIKES_QUERY} WHERE announcement_id = :announcement_id", params)
        comments = await database.fetch_all(f"{COMMENTS_QUERY} WHERE c.announcement_id = :announcement_id", params)
        return map_announcement(dict(row), [dict(l) for l in likes], [dict(c) for c in comments])

    @staticmethod
    @gateway_operation("announcements.create")
    async def create_announcement(data: AnnouncementData, author_id: UUID, author_role: Role) -> Announcement:
        row = await database.fetch_one(
            """
            INSERT INTO announcements (id, title, content, image_url, organization, author_id, author_role)
            VALUES (:id, :title, :content, :image_url, :organization, :author_id, :author_role)
            RETURNING *
            """,
            {
                "id": str(uuid.uuid4()),
                "title": data.title,
                "content": data.content,
                "image_url": data.image_url,
                "organization": data.organization.value,
                "author_id": str(author_id),
                "author_role": author_role.value
            }
        )
        entity_cache.invalidate("announcements")
        return map_announcement(dict(row)) if row else None

    @staticmethod
    @gateway_operation("announcements.update")
    async def update_announcement(announcement_id: UUID, data: AnnouncementData) -> Optional[Announcement]:
        row = await database.fetch_one(
            """
            UPDATE announcements
            SET title = :title,
                content = :content,
                image_url = :image_url,
                organization = :organization
            WHERE id = :id
            RETURNING *
            """,
            {
                "id": str(announcement_id),
                "title": data.title,
                "content": data.content,
                "image_url": data.image_url,
                "organization": data.organization.value
            }
        )
        entity_cache.invalidate("announcements")
        return map_announcement(dict(row)) if row else None

    @staticmethod
    @gateway_operation("announcements.delete")
    async def delete_announcement(announcement_id: UUID) -> Optional[UUID]:
        row = await database.fetch_one(
            "DELETE FROM announcements WHERE id = :id RETURNING id",
            {"id": str(announcement_id)}
        )
        entity_cache.invalidate("announcements")
        return row["id"] if row else None

    @staticmethod
    @gateway_operation("announcements.toggle_like")
    async def toggle_like(announcement_id: UUID, user_id: UUID) -> bool:
        """
        Remove the like if present, otherwise add it

        Returns the new liked state. The insert is conflict-safe, so two
        racing toggles can never leave a duplicate like behind.
        """
        params = {"announcement_id": str(announcement_id), "user_id": str(user_id)}
        removed = await database.fetch_one(
            """
            DELETE FROM announcement_likes
            WHERE announcement_id = :announcement_id AND user_id = :user_id
            RETURNING id
            """,
            params
        )
        if removed:
            liked = False
        else:
            await database.execute(
                """
                INSERT INTO announcement_likes (id, announcement_id, user_id)
                VALUES (:id, :announcement_id, :user_id)
                ON CONFLICT (announcement_id, user_id) DO NOTHING
                """,
                {"id": str(uuid.uuid4()), **params}
            )
            liked = True
        entity_cache.invalidate("announcements")
        return liked

    @staticmethod
    @gateway_operation("announcements.add_comment")
    async def add_comment(announcement_id: UUID, user_id: UUID, content: str) -> AnnouncementComment:
        row = await database.fetch_one(
            """
            INSERT INTO announcement_comments (id, announcement_id, user_id, content)
            VALUES (:id, :announcement_id, :user_id, :content)
            RETURNING id, announcement_id, user_id, content, created_at
            """,
            {
                "id": str(uuid.uuid4()),
                "announcement_id": str(announcement_id),
                "user_id": str(user_id),
                "content": content
            }
        )
        entity_cache.invalidate("announcements")
        return map_announcement_comment(dict(row)) if row else None


# Create singleton instance
announcement_service = AnnouncementService()
