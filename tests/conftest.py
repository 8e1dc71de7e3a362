"""Shared fixtures: entity factories and a clean entity cache."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.schemas.common import Role, Organization
from app.schemas.user import User
from app.schemas.workshop import Workshop, Participant
from app.services.cache import entity_cache

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_cache():
    entity_cache.clear()
    yield
    entity_cache.clear()


@pytest.fixture
def make_user():
    def factory(role=Role.MEMBER, officer_org=None, name="Ada Lovelace", created_at=NOW, **extra):
        return User(
            id=extra.pop("id", uuid.uuid4()),
            name=name,
            email=extra.pop("email", f"{name.split()[0].lower()}@example.edu"),
            role=role,
            officer_org=officer_org,
            created_at=created_at,
            **extra,
        )
    return factory


@pytest.fixture
def make_participant():
    def factory(name="Grace Hopper"):
        return Participant(id=uuid.uuid4(), name=name, email=f"{name.split()[0].lower()}@example.edu")
    return factory


@pytest.fixture
def make_workshop():
    def factory(
        title="Intro to Git",
        organization=Organization.CES,
        date=None,
        limit=0,
        participants=(),
        **extra,
    ):
        return Workshop(
            id=extra.pop("id", uuid.uuid4()),
            title=title,
            date=date or NOW + timedelta(days=7),
            organization=organization,
            limit=limit,
            participants=list(participants),
            **extra,
        )
    return factory
