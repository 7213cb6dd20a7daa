"""
Participant profiles and their notification inbox.

Profiles are Redis hashes so a merge is just an HSET of the supplied fields.
A "deleted" profile keeps its record (and created_at) with personal fields
blanked, so memberships and notifications never point at nothing.
"""

import json
import uuid
from datetime import datetime
from typing import Any, Optional

import redis.asyncio as redis
from pydantic import ValidationError
from redis.exceptions import WatchError

from waitlist.core.config import get_settings
from waitlist.core.exceptions import InvalidArgumentError, NotFoundError, StoreError
from waitlist.core.logging import get_logger
from waitlist.infrastructure.keys import notifications_key, profile_key
from waitlist.infrastructure.redis_client import translate_store_errors
from waitlist.schemas.profile import NotificationEntry, Profile, ProfileUpdate

logger = get_logger(__name__)

NOTIFICATION_UPDATABLE_FIELDS = {"read", "response", "responded_at"}


def _require(value: Optional[str], name: str) -> None:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{name} is empty")


def _to_field(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class ProfileStore:
    def __init__(self, client: redis.Redis):
        self.redis = client
        self.max_retry_attempts = get_settings().STORE_MAX_RETRY_ATTEMPTS

    @translate_store_errors
    async def get_profile(self, participant_id: str) -> Profile:
        _require(participant_id, "participantId")
        raw = await self.redis.hgetall(profile_key(participant_id))
        if not raw:
            raise NotFoundError("Profile not found")
        return Profile(**{**raw, "participant_id": participant_id})

    @translate_store_errors
    async def upsert_profile(self, participant_id: str, profile: ProfileUpdate) -> None:
        """Merge write: only fields present on `profile` overwrite stored values."""
        _require(participant_id, "participantId")
        if profile is None:
            raise InvalidArgumentError("profile is empty")
        fields = {k: _to_field(v) for k, v in profile.model_dump(exclude_none=True).items()}
        if not fields:
            return
        await self.redis.hset(profile_key(participant_id), mapping=fields)

    @translate_store_errors
    async def clear_profile(self, participant_id: str, now: datetime) -> None:
        """Blank personal fields and mark unregistered, keeping created_at."""
        _require(participant_id, "participantId")
        key = profile_key(participant_id)
        created_at = await self.redis.hget(key, "created_at")
        await self.redis.hset(
            key,
            mapping={
                "display_name": "",
                "email": "",
                "phone": "",
                "registered": "false",
                "created_at": created_at or now.isoformat(),
            },
        )
        logger.info("profile_cleared", participant_id=participant_id)

    @translate_store_errors
    async def set_banned(self, participant_id: str, banned: bool) -> None:
        _require(participant_id, "participantId")
        key = profile_key(participant_id)
        if not await self.redis.exists(key):
            raise NotFoundError("Profile not found")
        await self.redis.hset(key, "banned", _to_field(banned))

    @translate_store_errors
    async def is_banned(self, participant_id: str) -> bool:
        _require(participant_id, "participantId")
        return await self.redis.hget(profile_key(participant_id), "banned") == "true"

    @translate_store_errors
    async def add_notification(
        self,
        participant_id: str,
        event_id: str,
        message: str,
        category: str,
        now: datetime,
    ) -> str:
        _require(participant_id, "participantId")
        _require(message, "message")
        notification_id = uuid.uuid4().hex
        entry = NotificationEntry(
            id=notification_id,
            event_id=event_id,
            message=message,
            category=category,
            created_at=now,
        )
        await self.redis.hset(notifications_key(participant_id), notification_id, entry.model_dump_json())
        return notification_id

    @translate_store_errors
    async def list_notifications(self, participant_id: str) -> list[NotificationEntry]:
        """Newest first."""
        _require(participant_id, "participantId")
        raw = await self.redis.hvals(notifications_key(participant_id))
        entries = [NotificationEntry.model_validate_json(value) for value in raw]
        entries.sort(key=lambda e: e.created_at, reverse=True)
        return entries

    @translate_store_errors
    async def get_notification(self, participant_id: str, notification_id: str) -> NotificationEntry:
        _require(participant_id, "participantId")
        _require(notification_id, "notificationId")
        raw = await self.redis.hget(notifications_key(participant_id), notification_id)
        if raw is None:
            raise NotFoundError("Notification not found")
        return NotificationEntry.model_validate_json(raw)

    async def has_notification(self, participant_id: str, event_id: str, category: str) -> bool:
        notifications = await self.list_notifications(participant_id)
        return any(n.event_id == event_id and n.category == category for n in notifications)

    @translate_store_errors
    async def update_notification(
        self,
        participant_id: str,
        notification_id: str,
        fields: dict[str, Any],
    ) -> None:
        """Partial update of read / response / responded_at."""
        _require(participant_id, "participantId")
        _require(notification_id, "notificationId")
        if not fields:
            raise InvalidArgumentError("updates is empty")
        unknown = set(fields) - NOTIFICATION_UPDATABLE_FIELDS
        if unknown:
            raise InvalidArgumentError(f"Cannot update notification fields: {', '.join(sorted(unknown))}")

        key = notifications_key(participant_id)
        for _ in range(self.max_retry_attempts):
            async with self.redis.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(key)
                    current = await pipe.hget(key, notification_id)
                    if current is None:
                        raise NotFoundError("Notification not found")
                    try:
                        updated = NotificationEntry.model_validate(
                            {**json.loads(current), **fields}
                        )
                    except ValidationError as e:
                        raise InvalidArgumentError(f"Invalid notification update: {e.errors()[0]['msg']}") from e
                    pipe.multi()
                    pipe.hset(key, notification_id, updated.model_dump_json())
                    await pipe.execute()
                    return
                except WatchError:
                    continue

        raise StoreError("Notification changed concurrently. Please try again.")

    async def mark_notification_read(self, participant_id: str, notification_id: str) -> None:
        await self.update_notification(participant_id, notification_id, {"read": True})
