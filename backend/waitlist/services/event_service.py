"""
Event creation and organizer-only edits.
"""

import uuid
from typing import Optional

from waitlist.core.exceptions import ForbiddenError, InvalidArgumentError
from waitlist.core.logging import get_logger
from waitlist.schemas.event import Event, EventCreate, EventUpdate
from waitlist.services.event_store import EventStore
from waitlist.services.validation import parse_registration_time

logger = get_logger(__name__)


def _required(value: Optional[str], message: str) -> str:
    if value is None or not value.strip():
        raise InvalidArgumentError(message)
    return value.strip()


def _normalize_capacity(max_capacity: Optional[int]) -> Optional[int]:
    # Zero or negative means "no limit"
    if max_capacity is None or max_capacity <= 0:
        return None
    return max_capacity


def _check_window(registration_open: Optional[str], registration_close: Optional[str]) -> None:
    for label, value in (("open", registration_open), ("close", registration_close)):
        if value is not None and parse_registration_time(value) is None:
            raise InvalidArgumentError(f"Registration {label} date is not in the expected format")


def build_event(organizer_id: str, data: EventCreate) -> Event:
    """Validate organizer input and assemble a new, open Event (not yet persisted)."""
    if not organizer_id:
        raise InvalidArgumentError("organizerId is empty")

    name = _required(data.name, "Event name is required")
    event_date_time = _required(data.event_date_time, "Event date/time is required")
    registration_open = _required(data.registration_open, "Registration open date is required")
    registration_close = _required(data.registration_close, "Registration close date is required")
    _check_window(registration_open, registration_close)

    return Event(
        id=str(uuid.uuid4()),
        name=name,
        description=(data.description or "").strip(),
        location=(data.location or "").strip(),
        event_date_time=event_date_time,
        registration_open=registration_open,
        registration_close=registration_close,
        organizer_id=organizer_id,
        max_capacity=_normalize_capacity(data.max_capacity),
        open=True,
    )


async def create_event(store: EventStore, organizer_id: str, data: EventCreate) -> Event:
    event = build_event(organizer_id, data)
    await store.save_event(event)
    logger.info("event_created", event_id=event.id, organizer_id=organizer_id, max_capacity=event.max_capacity)
    return event


async def update_event(store: EventStore, event_id: str, organizer_id: str, changes: EventUpdate) -> Event:
    """Merge organizer changes into the stored event. The id never changes."""
    event = await store.get_event(event_id)
    if event.organizer_id != organizer_id:
        raise ForbiddenError("Only the organizer can edit this event")

    # max_capacity may be cleared explicitly; other fields ignore nulls
    updates = {
        k: v for k, v in changes.model_dump(exclude_unset=True).items()
        if v is not None or k == "max_capacity"
    }
    if "name" in updates:
        updates["name"] = _required(updates["name"], "Event name is required")
    if "max_capacity" in updates:
        updates["max_capacity"] = _normalize_capacity(updates["max_capacity"])
    _check_window(updates.get("registration_open"), updates.get("registration_close"))

    updated = event.model_copy(update=updates)
    await store.save_event(updated)
    logger.info("event_updated", event_id=event_id, fields=sorted(updates))
    return updated
