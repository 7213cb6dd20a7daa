"""
Pure eligibility rules for joining an event's waitlist.

Both rules take everything they need as arguments so they can be evaluated
without touching the store.
"""

from datetime import datetime, timezone
from typing import Optional

from waitlist.core.config import get_settings
from waitlist.core.logging import get_logger
from waitlist.schemas.event import Event

logger = get_logger(__name__)


def parse_registration_time(value: Optional[str]) -> Optional[datetime]:
    """Parse a stored window bound. Returns None when missing or malformed."""
    if value is None or not value.strip():
        return None
    try:
        return datetime.strptime(value.strip(), get_settings().REGISTRATION_TIME_FORMAT)
    except ValueError:
        return None


def _as_naive_utc(moment: datetime) -> datetime:
    # Stored bounds carry no offset; aware clocks are compared in UTC
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def is_within_registration_window(event: Optional[Event], now: datetime) -> bool:
    """True iff registration_open <= now <= registration_close. Fails closed."""
    if event is None:
        return False

    opens = parse_registration_time(event.registration_open)
    closes = parse_registration_time(event.registration_close)
    if opens is None or closes is None:
        logger.warning(
            "registration_window_unparseable",
            event_id=event.id,
            registration_open=event.registration_open,
            registration_close=event.registration_close,
        )
        return False

    current = _as_naive_utc(now)
    return opens <= current <= closes


def has_capacity(event: Optional[Event], current_waiting_count: int) -> bool:
    """True when the event is unlimited (unset or <= 0) or still below its cap."""
    if event is None:
        return False

    max_capacity = event.max_capacity
    if max_capacity is None or max_capacity <= 0:
        return True

    return current_waiting_count < max_capacity
