"""
Profile Service
Persistence gateway for profiles and their owned collections
"""

import asyncio
import uuid
from typing import Optional
from uuid import UUID

from app.database import database
from app.schemas.user import User
from app.services.cache import entity_cache, ALL
from app.services.mappers import map_profile
from app.services.result import gateway_operation


class ProfileService:
    """Gateway operations for profiles"""

    @staticmethod
    @gateway_operation("profiles.fetch_badges")
    async def fetch_badges(user_id: UUID) -> list:
        rows = await database.fetch_all(
            "SELECT * FROM badges WHERE user_id = :user_id ORDER BY issued_at DESC",
            {"user_id": str(user_id)}
        )
        return [dict(row) for row in rows]

    @staticmethod
    @gateway_operation("profiles.fetch_certificates")
    async def fetch_certificates(user_id: UUID) -> list:
        rows = await database.fetch_all(
            "SELECT * FROM certificates WHERE user_id = :user_id ORDER BY issued_at DESC",
            {"user_id": str(user_id)}
        )
        return [dict(row) for row in rows]

    @staticmethod
    @gateway_operation("profiles.fetch_notifications")
    async def fetch_notifications(user_id: UUID) -> list:
        rows = await database.fetch_all(
            "SELECT * FROM notifications WHERE user_id = :user_id ORDER BY created_at DESC",
            {"user_id": str(user_id)}
        )
        return [dict(row) for row in rows]

    @staticmethod
    async def build_user(profile: dict) -> User:
        """Map a profile row, fetching its three owned collections concurrently"""
        badges, certificates, notifications = await asyncio.gather(
            ProfileService.fetch_badges(profile["id"]),
            ProfileService.fetch_certificates(profile["id"]),
            ProfileService.fetch_notifications(profile["id"]),
        )
        return map_profile(profile, badges, certificates, notifications)

    @staticmethod
    @gateway_operation("profiles.fetch")
    async def fetch_profile(user_id: UUID) -> Optional[User]:
        """Get one user with badges, certificates and notifications"""
        cached = entity_cache.get("profiles", str(user_id))
        if cached is not None:
            return cached
        generation = entity_cache.generation("profiles")

        row = await database.fetch_one(
            "SELECT * FROM profiles WHERE id = :id",
            {"id": str(user_id)}
        )
        if not row:
            return None

        user = await ProfileService.build_user(dict(row))
        if not user.incomplete_sections:
            entity_cache.set("profiles", str(user_id), user, generation)
        return user

    @staticmethod
    @gateway_operation("profiles.list")
    async def list_users() -> list:
        """All users ordered by name"""
        cached = entity_cache.get("profiles", ALL)
        if cached is not None:
            return cached
        generation = entity_cache.generation("profiles")

        rows = await database.fetch_all("SELECT * FROM profiles ORDER BY name")
        users = list(await asyncio.gather(*(ProfileService.build_user(dict(row)) for row in rows)))
        if not any(u.incomplete_sections for u in users):
            entity_cache.set("profiles", ALL, users, generation)
        return users

    @staticmethod
    @gateway_operation("profiles.fetch_credentials")
    async def fetch_credentials(email: str) -> Optional[dict]:
        """Profile row including password hash, for sign-in"""
        row = await database.fetch_one(
            "SELECT id, email, password_hash, role FROM profiles WHERE LOWER(email) = LOWER(:email)",
            {"email": email}
        )
        return dict(row) if row else None

    @staticmethod
    @gateway_operation("profiles.create")
    async def create_profile(name: str, email: str, password_hash: str) -> dict:
        """Provision a new MEMBER profile at sign-up"""
        row = await database.fetch_one(
            """
            INSERT INTO profiles (id, name, email, password_hash, role, officer_org)
            VALUES (:id, :name, :email, :password_hash, 'MEMBER', NULL)
            RETURNING id, name, email, role, created_at
            """,
            {
                "id": str(uuid.uuid4()),
                "name": name,
                "email": email.lower(),
                "password_hash": password_hash
            }
        )
        entity_cache.invalidate("profiles")
        return dict(row) if row else None

    @staticmethod
    @gateway_operation("profiles.update_password")
    async def update_password(user_id: UUID, password_hash: str) -> Optional[UUID]:
        row = await database.fetch_one(
            "UPDATE profiles SET password_hash = :password_hash WHERE id = :id RETURNING id",
            {"id": str(user_id), "password_hash": password_hash}
        )
        return row["id"] if row else None

    @staticmethod
    @gateway_operation("profiles.save")
    async def save_user(user: User) -> Optional[dict]:
        """Write the editable profile fields of a user"""
        row = await database.fetch_one(
            """
            UPDATE profiles
            SET name = :name,
                email = :email,
                role = :role,
                officer_org = :officer_org,
                avatar_url = :avatar_url
            WHERE id = :id
            RETURNING id, name, email, role, officer_org, avatar_url, created_at
            """,
            {
                "id": str(user.id),
                "name": user.name,
                "email": user.email,
                "role": user.role.value,
                "officer_org": user.officer_org.value if user.officer_org else None,
                "avatar_url": user.avatar_url
            }
        )
        # participant and author snapshots are joined from profiles
        entity_cache.invalidate("profiles", "workshops", "announcements")
        return dict(row) if row else None


# Create singleton instance
profile_service = ProfileService()
