"""
Workshop Service
Persistence gateway for workshops, participation and comments
"""

import uuid
from typing import Optional
from uuid import UUID

from app.database import database
from app.schemas.workshop import Workshop, WorkshopData, Comment
from app.services.cache import entity_cache, ALL
from app.services.mappers import map_workshop, map_comment, group_by
from app.services.result import ErrorKind, GatewayResult, gateway_operation

SESSION_FULL = "This session is full."

PARTICIPANTS_QUERY = """
    SELECT wp.workshop_id, p.id, p.name, p.email, p.avatar_url
    FROM workshop_participants wp
    JOIN profiles p ON p.id = wp.user_id
"""

COMMENTS_QUERY = """
    SELECT c.id, c.workshop_id, c.user_id, c.content, c.created_at,
           p.name AS author_name, p.avatar_url AS author_avatar
    FROM comments c
    LEFT JOIN profiles p ON p.id = c.user_id
"""


def _workshop_params(data: WorkshopData) -> dict:
    return {
        "title": data.title,
        "description": data.description,
        "date": data.date,
        "organization": data.organization.value,
        "banner_url": data.banner_url,
        "badge_url": data.badge_url,
        "certificate_url": data.certificate_url,
        "participant_limit": data.limit
    }


class WorkshopService:
    """Gateway operations for workshops"""

    @staticmethod
    @gateway_operation("workshops.list")
    async def list_workshops() -> list:
        """All workshops in date order, with participants and comments"""
        cached = entity_cache.get("workshops", ALL)
        if cached is not None:
            return cached
        generation = entity_cache.generation("workshops")

        rows = await database.fetch_all("SELECT * FROM workshops ORDER BY date ASC")
        participants = group_by(
            [dict(r) for r in await database.fetch_all(f"{PARTICIPANTS_QUERY} ORDER BY wp.joined_at")],
            "workshop_id"
        )
        comments = group_by(
            [dict(r) for r in await database.fetch_all(COMMENTS_QUERY)],
            "workshop_id"
        )

        workshops = [
            map_workshop(dict(row), participants.get(str(row["id"]), []), comments.get(str(row["id"]), []))
            for row in rows
        ]
        entity_cache.set("workshops", ALL, workshops, generation)
        return workshops

    @staticmethod
    @gateway_operation("workshops.get")
    async def get_workshop(workshop_id: UUID) -> Optional[Workshop]:
        cached = entity_cache.get("workshops", str(workshop_id))
        if cached is not None:
            return cached
        generation = entity_cache.generation("workshops")

        row = await database.fetch_one(
            "SELECT * FROM workshops WHERE id = :id",
            {"id": str(workshop_id)}
        )
        if not row:
            return None

        params = {"workshop_id": str(workshop_id)}
        participants = await database.fetch_all(
            f"{PARTICIPANTS_QUERY} WHERE wp.workshop_id = :workshop_id ORDER BY wp.joined_at", params
        )
        comments = await database.fetch_all(f"{COMMENTS_QUERY} WHERE c.workshop_id = :workshop_id", params)

        workshop = map_workshop(dict(row), [dict(p) for p in participants], [dict(c) for c in comments])
        entity_cache.set("workshops", str(workshop_id), workshop, generation)
        return workshop

    @staticmethod
    @gateway_operation("workshops.create")
    async def create_workshop(data: WorkshopData) -> Workshop:
        row = await database.fetch_one(
            """
            INSERT INTO workshops
            (id, title, description, date, organization, banner_url, badge_url, certificate_url, participant_limit)
            VALUES
            (:id, :title, :description, :date, :organization, :banner_url, :badge_url, :certificate_url, :participant_limit)
            RETURNING *
            """,
            {"id": str(uuid.uuid4()), **_workshop_params(data)}
        )
        entity_cache.invalidate("workshops")
        return map_workshop(dict(row)) if row else None

    @staticmethod
    @gateway_operation("workshops.update")
    async def update_workshop(workshop_id: UUID, data: WorkshopData) -> Optional[Workshop]:
        row = await database.fetch_one(
            """
            UPDATE workshops
            SET title = :title,
                description = :description,
                date = :date,
                organization = :organization,
                banner_url = :banner_url,
                badge_url = :badge_url,
                certificate_url = :certificate_url,
                participant_limit = :participant_limit
            WHERE id = :id
            RETURNING *
            """,
            {"id": str(workshop_id), **_workshop_params(data)}
        )
        entity_cache.invalidate("workshops")
        return map_workshop(dict(row)) if row else None

    @staticmethod
    @gateway_operation("workshops.delete")
    async def delete_workshop(workshop_id: UUID) -> Optional[UUID]:
        row = await database.fetch_one(
            "DELETE FROM workshops WHERE id = :id RETURNING id",
            {"id": str(workshop_id)}
        )
        # awards keep their title snapshot but lose the workshop link
        entity_cache.invalidate("workshops", "profiles")
        return row["id"] if row else None

    @staticmethod
    @gateway_operation("workshops.add_participant")
    async def add_participant(workshop_id: UUID, user_id: UUID) -> dict:
        """
        Insert a participation row if a seat is left

        The workshop row stays locked from the seat count to the insert,
        so concurrent joins are admitted one at a time. A duplicate is a
        CONFLICT, a full workshop a CAPACITY error.
        """
        params = {"workshop_id": str(workshop_id)}
        async with database.transaction():
            workshop = await database.fetch_one(
                "SELECT participant_limit FROM workshops WHERE id = :workshop_id FOR UPDATE",
                params
            )
            if not workshop:
                return None

            limit = workshop["participant_limit"] or 0
            if limit:
                taken = await database.fetch_one(
                    "SELECT COUNT(*) AS taken FROM workshop_participants WHERE workshop_id = :workshop_id",
                    params
                )
                if taken["taken"] >= limit:
                    return GatewayResult.failure(ErrorKind.CAPACITY, SESSION_FULL, "workshops.add_participant")

            row = await database.fetch_one(
                """
                INSERT INTO workshop_participants (id, workshop_id, user_id)
                VALUES (:id, :workshop_id, :user_id)
                RETURNING id, workshop_id, user_id, joined_at
                """,
                {"id": str(uuid.uuid4()), "user_id": str(user_id), **params}
            )
        entity_cache.invalidate("workshops")
        return dict(row) if row else None

    @staticmethod
    @gateway_operation("workshops.remove_participant")
    async def remove_participant(workshop_id: UUID, user_id: UUID) -> Optional[UUID]:
        row = await database.fetch_one(
            """
            DELETE FROM workshop_participants
            WHERE workshop_id = :workshop_id AND user_id = :user_id
            RETURNING id
            """,
            {"workshop_id": str(workshop_id), "user_id": str(user_id)}
        )
        entity_cache.invalidate("workshops")
        return row["id"] if row else None

    @staticmethod
    @gateway_operation("workshops.add_comment")
    async def add_comment(workshop_id: UUID, user_id: UUID, content: str) -> Comment:
        row = await database.fetch_one(
            """
            INSERT INTO comments (id, workshop_id, user_id, content)
            VALUES (:id, :workshop_id, :user_id, :content)
            RETURNING id, workshop_id, user_id, content, created_at
            """,
            {
                "id": str(uuid.uuid4()),
                "workshop_id": str(workshop_id),
                "user_id": str(user_id),
                "content": content
            }
        )
        entity_cache.invalidate("workshops")
        return map_comment(dict(row)) if row else None


# Create singleton instance
workshop_service = WorkshopService()
