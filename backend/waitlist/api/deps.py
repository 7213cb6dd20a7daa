"""
FastAPI dependencies: store client, stores, services and caller identity.

The caller is identified by the opaque, stable participant id the client
sends in X-Participant-Id. There is no authentication layer.
"""

import redis.asyncio as redis
from fastapi import Depends, Header

from waitlist.core.exceptions import ForbiddenError, InvalidArgumentError
from waitlist.infrastructure.redis_client import get_redis
from waitlist.schemas.event import Event
from waitlist.services.draw_service import DrawEngine
from waitlist.services.event_store import EventStore
from waitlist.services.invitation_service import InvitationResponseService
from waitlist.services.join_service import JoinLeaveService
from waitlist.services.profile_store import ProfileStore
from waitlist.services.strategy_factory import get_draw_lock
from waitlist.services.waitlist_store import WaitlistStore


async def get_store_client() -> redis.Redis:
    return await get_redis()


def get_event_store(client: redis.Redis = Depends(get_store_client)) -> EventStore:
    return EventStore(client)


def get_waitlist_store(client: redis.Redis = Depends(get_store_client)) -> WaitlistStore:
    return WaitlistStore(client)


def get_profile_store(client: redis.Redis = Depends(get_store_client)) -> ProfileStore:
    return ProfileStore(client)


def get_join_service(
    waitlists: WaitlistStore = Depends(get_waitlist_store),
    profiles: ProfileStore = Depends(get_profile_store),
) -> JoinLeaveService:
    return JoinLeaveService(waitlists, profiles)


def get_draw_engine(
    client: redis.Redis = Depends(get_store_client),
    waitlists: WaitlistStore = Depends(get_waitlist_store),
    profiles: ProfileStore = Depends(get_profile_store),
) -> DrawEngine:
    return DrawEngine(waitlists, profiles, draw_lock=get_draw_lock(client))


def get_invitation_service(
    waitlists: WaitlistStore = Depends(get_waitlist_store),
    profiles: ProfileStore = Depends(get_profile_store),
) -> InvitationResponseService:
    return InvitationResponseService(waitlists, profiles)


def get_participant_id(x_participant_id: str = Header(...)) -> str:
    participant_id = x_participant_id.strip()
    if not participant_id:
        raise InvalidArgumentError("X-Participant-Id header is empty")
    return participant_id


async def get_organized_event(
    event_id: str,
    participant_id: str = Depends(get_participant_id),
    events: EventStore = Depends(get_event_store),
) -> Event:
    """The path event, provided the caller organizes it."""
    event = await events.get_event(event_id)
    if event.organizer_id != participant_id:
        raise ForbiddenError("Only the organizer can manage this event")
    return event
