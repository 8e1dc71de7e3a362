"""
Award Service
Persistence gateway for badge and certificate issuance and revocation
"""

import uuid
from datetime import datetime
from typing import Optional
from uuid import UUID

from app.database import database
from app.schemas.award import Badge, Certificate, AwardSet
from app.schemas.workshop import Workshop
from app.services.cache import entity_cache
from app.services.mappers import map_badge, map_certificate
from app.services.result import gateway_operation


def badge_title(workshop: Workshop) -> str:
    return f"{workshop.title} Graduate"


def certificate_title(workshop: Workshop) -> str:
    return f"Certificate of Completion - {workshop.title}"


def certificate_content(recipient_name: str, workshop: Workshop) -> str:
    return (
        f"This certifies that {recipient_name} has successfully completed the workshop "
        f"{workshop.title} hosted by {workshop.organization.value}."
    )


class AwardService:
    """Gateway operations for badges and certificates"""

    @staticmethod
    @gateway_operation("awards.issue_badge")
    async def issue_badge(user_id: UUID, workshop: Workshop, issued_at: datetime) -> Badge:
        row = await database.fetch_one(
            """
            INSERT INTO badges (id, user_id, workshop_id, title, organization, workshop_title, image_url, issued_at)
            VALUES (:id, :user_id, :workshop_id, :title, :organization, :workshop_title, :image_url, :issued_at)
            RETURNING *
            """,
            {
                "id": str(uuid.uuid4()),
                "user_id": str(user_id),
                "workshop_id": str(workshop.id),
                "title": badge_title(workshop),
                "organization": workshop.organization.value,
                "workshop_title": workshop.title,
                "image_url": workshop.badge_url,
                "issued_at": issued_at
            }
        )
        entity_cache.invalidate_key("profiles", str(user_id))
        return map_badge(dict(row)) if row else None

    @staticmethod
    @gateway_operation("awards.issue_certificate")
    async def issue_certificate(
        user_id: UUID,
        recipient_name: str,
        workshop: Workshop,
        issued_at: datetime
    ) -> Certificate:
        row = await database.fetch_one(
            """
            INSERT INTO certificates
            (id, user_id, workshop_id, title, organization, workshop_title, content, file_url, issued_at)
            VALUES
            (:id, :user_id, :workshop_id, :title, :organization, :workshop_title, :content, :file_url, :issued_at)
            RETURNING *
            """,
            {
                "id": str(uuid.uuid4()),
                "user_id": str(user_id),
                "workshop_id": str(workshop.id),
                "title": certificate_title(workshop),
                "organization": workshop.organization.value,
                "workshop_title": workshop.title,
                "content": certificate_content(recipient_name, workshop),
                "file_url": workshop.certificate_url,
                "issued_at": issued_at
            }
        )
        entity_cache.invalidate_key("profiles", str(user_id))
        return map_certificate(dict(row)) if row else None

    @staticmethod
    @gateway_operation("awards.delete_badge")
    async def delete_badge(badge_id: UUID) -> Optional[UUID]:
        row = await database.fetch_one(
            "DELETE FROM badges WHERE id = :id RETURNING id, user_id",
            {"id": str(badge_id)}
        )
        if not row:
            return None
        entity_cache.invalidate_key("profiles", str(row["user_id"]))
        return row["id"]

    @staticmethod
    @gateway_operation("awards.delete_certificate")
    async def delete_certificate(certificate_id: UUID) -> Optional[UUID]:
        row = await database.fetch_one(
            "DELETE FROM certificates WHERE id = :id RETURNING id, user_id",
            {"id": str(certificate_id)}
        )
        if not row:
            return None
        entity_cache.invalidate_key("profiles", str(row["user_id"]))
        return row["id"]

    @staticmethod
    @gateway_operation("awards.find")
    async def find_awards(user_id: UUID, workshop_id: UUID) -> AwardSet:
        """Awards a user already holds for a workshop"""
        params = {"user_id": str(user_id), "workshop_id": str(workshop_id)}
        badges = await database.fetch_all(
            "SELECT * FROM badges WHERE user_id = :user_id AND workshop_id = :workshop_id", params
        )
        certificates = await database.fetch_all(
            "SELECT * FROM certificates WHERE user_id = :user_id AND workshop_id = :workshop_id", params
        )
        # an empty set is still a meaningful answer
        return AwardSet(
            badges=[map_badge(dict(b)) for b in badges],
            certificates=[map_certificate(dict(c)) for c in certificates]
        )

    @staticmethod
    @gateway_operation("awards.get_certificate")
    async def get_certificate(certificate_id: UUID) -> Optional[dict]:
        """Certificate with its owner id and name, for document rendering"""
        row = await database.fetch_one(
            """
            SELECT c.*, p.name AS owner_name
            FROM certificates c
            JOIN profiles p ON p.id = c.user_id
            WHERE c.id = :id
            """,
            {"id": str(certificate_id)}
        )
        if not row:
            return None
        row = dict(row)
        return {
            "certificate": map_certificate(row),
            "user_id": row["user_id"],
            "owner_name": row["owner_name"]
        }

    @staticmethod
    @gateway_operation("awards.revoke")
    async def revoke_awards(user_id: UUID, workshop_id: UUID) -> dict:
        """Delete every badge and certificate of a user for one workshop"""
        params = {"user_id": str(user_id), "workshop_id": str(workshop_id)}
        badges = await database.fetch_all(
            "DELETE FROM badges WHERE user_id = :user_id AND workshop_id = :workshop_id RETURNING id", params
        )
        certificates = await database.fetch_all(
            "DELETE FROM certificates WHERE user_id = :user_id AND workshop_id = :workshop_id RETURNING id", params
        )
        entity_cache.invalidate_key("profiles", str(user_id))
        return {"badges_removed": len(badges), "certificates_removed": len(certificates)}


# Create singleton instance
award_service = AwardService()
