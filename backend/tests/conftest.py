"""
Pytest fixtures for stores, services, and the HTTP client.

Redis is replaced by an in-process fakeredis server (with Lua, for the draw
lock) that is flushed after every test.
"""

import random
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fakeredis import FakeAsyncRedis
from httpx import ASGITransport, AsyncClient

from waitlist.api.deps import get_store_client
from waitlist.core.config import get_settings
from waitlist.main import app
from waitlist.schemas.event import Event
from waitlist.schemas.membership import MembershipSet
from waitlist.schemas.profile import ProfileUpdate
from waitlist.services.draw_service import DrawEngine
from waitlist.services.event_store import EventStore
from waitlist.services.invitation_service import InvitationResponseService
from waitlist.services.join_service import JoinLeaveService
from waitlist.services.profile_store import ProfileStore
from waitlist.services.waitlist_store import WaitlistStore

# Inside the registration window of `open_event`
NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)

ORGANIZER_ID = "organizer-device"


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[FakeAsyncRedis, None]:
    client = FakeAsyncRedis(decode_responses=True)
    yield client
    await client.flushall()
    await client.aclose()


@pytest.fixture
def waitlist_store(redis_client) -> WaitlistStore:
    return WaitlistStore(redis_client)


@pytest.fixture
def profile_store(redis_client) -> ProfileStore:
    return ProfileStore(redis_client)


@pytest.fixture
def event_store(redis_client) -> EventStore:
    return EventStore(redis_client)


@pytest.fixture
def join_service(waitlist_store, profile_store) -> JoinLeaveService:
    return JoinLeaveService(waitlist_store, profile_store)


@pytest.fixture
def draw_engine(waitlist_store, profile_store) -> DrawEngine:
    return DrawEngine(waitlist_store, profile_store, rng=random.Random(42))


@pytest.fixture
def invitation_service(waitlist_store, profile_store) -> InvitationResponseService:
    return InvitationResponseService(waitlist_store, profile_store)


@pytest_asyncio.fixture
async def open_event(event_store) -> Event:
    """Registration open for all of March 2026, no capacity limit."""
    event = Event(
        id="event-1",
        name="Swim Lessons",
        description="Beginner lessons",
        location="Rec Centre",
        event_date_time="2026-04-10T18:00:00",
        registration_open="2026-03-01T00:00:00",
        registration_close="2026-03-31T23:59:59",
        organizer_id=ORGANIZER_ID,
        max_capacity=None,
    )
    await event_store.save_event(event)
    return event


async def register_participant(profiles: ProfileStore, participant_id: str) -> None:
    await profiles.upsert_profile(
        participant_id,
        ProfileUpdate(
            display_name=f"Entrant {participant_id}",
            email=f"{participant_id}@example.com",
            registered=True,
            created_at=NOW,
        ),
    )


async def fill_waitlist(store: WaitlistStore, event_id: str, count: int) -> list[str]:
    ids = [f"entrant-{i:02d}" for i in range(count)]
    for offset, participant_id in enumerate(ids):
        await store.add_to_waiting(event_id, participant_id, NOW + timedelta(seconds=offset))
    return ids


async def assert_single_membership(store: WaitlistStore, event_id: str, participant_ids) -> None:
    """Every participant sits in at most one of the five sets."""
    for participant_id in participant_ids:
        sets = await store.membership_of(event_id, participant_id)
        assert len(sets) <= 1, f"{participant_id} is in {[s.value for s in sets]}"


async def members(store: WaitlistStore, event_id: str, set_name: MembershipSet) -> set[str]:
    return {r.participant_id for r in await store.list_set(event_id, set_name)}


def window_around_now() -> tuple[str, str]:
    fmt = get_settings().REGISTRATION_TIME_FORMAT
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return (now - timedelta(days=1)).strftime(fmt), (now + timedelta(days=30)).strftime(fmt)


@pytest_asyncio.fixture
async def client(redis_client) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that overrides the store dependency with fakeredis."""

    async def override_get_store_client():
        return redis_client

    app.dependency_overrides[get_store_client] = override_get_store_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def as_participant(participant_id: str) -> dict:
    return {"X-Participant-Id": participant_id}
