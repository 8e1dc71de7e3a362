"""Tests for gateway operations against an in-memory stand-in for the database."""

import asyncio
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest

from app.schemas.common import NotificationType
from app.schemas.workshop import WorkshopData
from app.services.announcement_service import announcement_service
from app.services.notification_service import notification_service
from app.services.cache import entity_cache, ALL
from app.services.profile_service import profile_service
from app.services.result import ErrorKind
from app.services.workshop_service import workshop_service

CREATED = datetime(2026, 1, 5, tzinfo=timezone.utc)


class LikesTable:
    """Just enough of `databases.Database` for the like toggle"""

    def __init__(self):
        self.rows = set()

    async def fetch_one(self, query, values):
        key = (values["announcement_id"], values["user_id"])
        if query.strip().startswith("DELETE") and key in self.rows:
            self.rows.remove(key)
            return {"id": "like"}
        return None

    async def execute(self, query, values):
        # ON CONFLICT DO NOTHING
        self.rows.add((values["announcement_id"], values["user_id"]))


class TestToggleLike:
    @pytest.mark.asyncio
    async def test_toggle_twice_restores_original_state(self):
        table = LikesTable()
        announcement_id, user_id = uuid.uuid4(), uuid.uuid4()

        with patch("app.services.announcement_service.database", table):
            first = await announcement_service.toggle_like(announcement_id, user_id)
            assert first.data is True
            assert len(table.rows) == 1

            second = await announcement_service.toggle_like(announcement_id, user_id)
            assert second.is_ok
            assert second.data is False
            assert table.rows == set()

    @pytest.mark.asyncio
    async def test_toggle_invalidates_feed_cache(self):
        entity_cache.set("announcements", ALL, ["stale"])

        with patch("app.services.announcement_service.database", LikesTable()):
            await announcement_service.toggle_like(uuid.uuid4(), uuid.uuid4())

        assert entity_cache.get("announcements") is None


class TestWorkshopGateway:
    @pytest.mark.asyncio
    async def test_list_reads_through_cache(self):
        workshop_id = uuid.uuid4()
        database = AsyncMock()
        database.fetch_all.side_effect = [
            [{"id": workshop_id, "title": "Intro to Git", "description": None, "date": CREATED,
              "organization": "CES", "banner_url": None, "badge_url": None, "certificate_url": None,
              "participant_limit": 0}],
            [{"workshop_id": workshop_id, "id": uuid.uuid4(), "name": "Grace", "email": "g@example.edu",
              "avatar_url": None}],
            [],
        ]

        with patch("app.services.workshop_service.database", database):
            first = await workshop_service.list_workshops()
            second = await workshop_service.list_workshops()

        assert len(first.data) == 1
        assert len(first.data[0].participants) == 1
        assert second.data is first.data
        assert database.fetch_all.await_count == 3

    @pytest.mark.asyncio
    async def test_write_invalidates_cache(self):
        entity_cache.set("workshops", ALL, ["stale"])
        database = AsyncMock()
        database.fetch_one.return_value = {
            "id": uuid.uuid4(), "title": "New", "description": "", "date": CREATED, "organization": "TCC",
            "banner_url": None, "badge_url": None, "certificate_url": None, "participant_limit": 10,
        }

        with patch("app.services.workshop_service.database", database):
            result = await workshop_service.create_workshop(WorkshopData(title="New", date=CREATED, limit=10))

        assert result.data.limit == 10
        assert entity_cache.get("workshops") is None

    @pytest.mark.asyncio
    async def test_backend_failure_is_an_error_not_empty(self):
        database = AsyncMock()
        database.fetch_all.side_effect = ConnectionError("connection refused")

        with patch("app.services.workshop_service.database", database):
            result = await workshop_service.list_workshops()

        assert result.is_error
        assert result.error.kind == ErrorKind.BACKEND

    @pytest.mark.asyncio
    async def test_missing_workshop_is_empty(self):
        database = AsyncMock()
        database.fetch_one.return_value = None

        with patch("app.services.workshop_service.database", database):
            result = await workshop_service.get_workshop(uuid.uuid4())

        assert result.is_empty


class TestProfileGateway:
    @pytest.mark.asyncio
    async def test_profile_with_failed_section_is_not_cached(self):
        user_id = uuid.uuid4()
        database = AsyncMock()
        database.fetch_one.return_value = {
            "id": user_id, "name": "Ada", "email": "ada@example.edu", "role": "MEMBER",
            "officer_org": None, "avatar_url": None, "created_at": CREATED,
        }

        async def fetch_all(query, values):
            if "FROM badges" in query:
                raise ConnectionError("timeout")
            return []

        database.fetch_all.side_effect = fetch_all

        with patch("app.services.profile_service.database", database):
            result = await profile_service.fetch_profile(user_id)

        assert result.is_ok
        assert result.data.incomplete_sections == ["badges"]
        assert entity_cache.get("profiles", str(user_id)) is None


class ProfileStore:
    """One profile and its notifications; the first notifications read waits until resumed"""

    def __init__(self, user_id):
        self.profile = {
            "id": user_id, "name": "Ada", "email": "ada@example.edu", "role": "MEMBER",
            "officer_org": None, "avatar_url": None, "created_at": CREATED,
        }
        self.notifications = []
        self.reading = asyncio.Event()
        self.resume = asyncio.Event()
        self.hold_next_read = True

    async def fetch_one(self, query, values=None):
        if query.strip().startswith("INSERT INTO notifications"):
            row = {**values, "is_read": False, "created_at": CREATED}
            self.notifications.append(row)
            return row
        return self.profile

    async def fetch_all(self, query, values=None):
        if "FROM notifications" not in query:
            return []
        snapshot = list(self.notifications)
        if self.hold_next_read:
            self.hold_next_read = False
            self.reading.set()
            await self.resume.wait()
        return snapshot


class TestCacheAcrossConcurrentWrites:
    @pytest.mark.asyncio
    async def test_read_overlapping_a_write_does_not_cache_old_data(self):
        user_id = uuid.uuid4()
        store = ProfileStore(user_id)

        with patch("app.services.profile_service.database", store), \
                patch("app.services.notification_service.database", store):
            reader = asyncio.create_task(profile_service.fetch_profile(user_id))
            await store.reading.wait()

            sent = await notification_service.send_notification(
                user_id, "Registered!", "See you there!", NotificationType.SUCCESS
            )
            assert sent.is_ok

            store.resume.set()
            overlapping = await reader
            after_write = await profile_service.fetch_profile(user_id)

        assert overlapping.data.notifications == []
        assert len(after_write.data.notifications) == 1


class SeatTable:
    """A workshop with a participant limit; the transaction stands in for the row lock"""

    def __init__(self, limit):
        self.limit = limit
        self.rows = []
        self._lock = asyncio.Lock()

    def transaction(self):
        return self._lock

    async def fetch_one(self, query, values):
        await asyncio.sleep(0)
        if "FOR UPDATE" in query:
            return {"participant_limit": self.limit}
        if "COUNT(*)" in query:
            return {"taken": len(self.rows)}
        self.rows.append(values)
        return {"id": values["id"], "workshop_id": values["workshop_id"],
                "user_id": values["user_id"], "joined_at": CREATED}


class TestSeatLimit:
    @pytest.mark.asyncio
    async def test_concurrent_joins_cannot_exceed_limit(self):
        table = SeatTable(limit=1)
        workshop_id = uuid.uuid4()

        with patch("app.services.workshop_service.database", table):
            results = await asyncio.gather(
                workshop_service.add_participant(workshop_id, uuid.uuid4()),
                workshop_service.add_participant(workshop_id, uuid.uuid4()),
            )

        assert len(table.rows) == 1
        assert sorted(r.is_ok for r in results) == [False, True]
        refused = next(r for r in results if r.is_error)
        assert refused.error.kind == ErrorKind.CAPACITY
        assert refused.error.message == "This session is full."

    @pytest.mark.asyncio
    async def test_unlimited_workshop_skips_seat_count(self):
        table = SeatTable(limit=0)

        with patch("app.services.workshop_service.database", table):
            result = await workshop_service.add_participant(uuid.uuid4(), uuid.uuid4())

        assert result.is_ok
        assert len(table.rows) == 1
