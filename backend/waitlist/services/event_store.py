"""
Event documents keyed by generated id, plus an index of all ids.
"""

import redis.asyncio as redis

from waitlist.core.exceptions import InvalidArgumentError, NotFoundError
from waitlist.infrastructure.keys import event_key, events_index_key
from waitlist.infrastructure.redis_client import translate_store_errors
from waitlist.schemas.event import Event


class EventStore:
    def __init__(self, client: redis.Redis):
        self.redis = client

    @translate_store_errors
    async def save_event(self, event: Event) -> None:
        """Add or replace an event document."""
        if not event.id:
            raise InvalidArgumentError("eventId is empty")
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.set(event_key(event.id), event.model_dump_json())
            pipe.sadd(events_index_key(), event.id)
            await pipe.execute()

    @translate_store_errors
    async def get_event(self, event_id: str) -> Event:
        if not event_id:
            raise InvalidArgumentError("eventId is empty")
        raw = await self.redis.get(event_key(event_id))
        if raw is None:
            raise NotFoundError(f"Event {event_id} not found")
        return Event.model_validate_json(raw)

    @translate_store_errors
    async def list_events(self) -> list[Event]:
        ids = sorted(await self.redis.smembers(events_index_key()))
        if not ids:
            return []
        raw = await self.redis.mget([event_key(event_id) for event_id in ids])
        return [Event.model_validate_json(value) for value in raw if value is not None]
