"""
Redis key layout.

    {prefix}:events                                 set of event ids
    {prefix}:event:{event_id}                       event JSON
    {prefix}:event:{event_id}:{set_name}            hash participant_id -> membership JSON
    {prefix}:event:{event_id}:draw-lock             advisory draw lock
    {prefix}:profile:{participant_id}               hash of profile fields
    {prefix}:profile:{participant_id}:notifications hash notification_id -> JSON
"""

from waitlist.core.config import get_settings


def _prefix() -> str:
    return get_settings().REDIS_KEY_PREFIX


def events_index_key() -> str:
    return f"{_prefix()}:events"


def event_key(event_id: str) -> str:
    return f"{_prefix()}:event:{event_id}"


def membership_key(event_id: str, set_name: str) -> str:
    return f"{_prefix()}:event:{event_id}:{set_name}"


def draw_lock_key(event_id: str) -> str:
    return f"{_prefix()}:event:{event_id}:draw-lock"


def profile_key(participant_id: str) -> str:
    return f"{_prefix()}:profile:{participant_id}"


def notifications_key(participant_id: str) -> str:
    return f"{_prefix()}:profile:{participant_id}:notifications"
