"""
Tests for registration window and capacity rules.
"""

from datetime import datetime, timedelta, timezone

import pytest

from waitlist.schemas.event import Event
from waitlist.services.validation import has_capacity, is_within_registration_window


def make_event(**overrides) -> Event:
    fields = {
        "id": "event-1",
        "name": "Pottery",
        "event_date_time": "2026-04-01T10:00:00",
        "registration_open": "2026-03-01T00:00:00",
        "registration_close": "2026-03-31T23:59:59",
        "organizer_id": "organizer",
    }
    fields.update(overrides)
    return Event(**fields)


def test_inside_window():
    assert is_within_registration_window(make_event(), datetime(2026, 3, 15, 9, 30))


def test_window_bounds_are_inclusive():
    event = make_event()
    assert is_within_registration_window(event, datetime(2026, 3, 1, 0, 0, 0))
    assert is_within_registration_window(event, datetime(2026, 3, 31, 23, 59, 59))


def test_outside_window():
    event = make_event()
    assert not is_within_registration_window(event, datetime(2026, 2, 28, 23, 59, 59))
    assert not is_within_registration_window(event, datetime(2026, 4, 1, 0, 0, 0))


def test_aware_now_compared_in_utc():
    """An aware clock is converted to UTC before comparing to the stored bounds."""
    event = make_event()
    # 2026-04-01 01:00 at +02:00 is still March 31st 23:00 UTC
    now = datetime(2026, 4, 1, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    assert is_within_registration_window(event, now)


@pytest.mark.parametrize("field", ["registration_open", "registration_close"])
def test_missing_bound_fails_closed(field):
    event = make_event(**{field: None})
    assert not is_within_registration_window(event, datetime(2026, 3, 15))


def test_unparseable_bound_fails_closed():
    event = make_event(registration_open="next tuesday")
    assert not is_within_registration_window(event, datetime(2026, 3, 15))


def test_no_event_fails_closed():
    assert not is_within_registration_window(None, datetime(2026, 3, 15))


@pytest.mark.parametrize("max_capacity", [None, 0, -3])
def test_unlimited_capacity_ignores_count(max_capacity):
    event = make_event(max_capacity=max_capacity)
    assert has_capacity(event, 0)
    assert has_capacity(event, 10_000)


def test_capacity_reached():
    event = make_event(max_capacity=5)
    assert has_capacity(event, 4)
    assert not has_capacity(event, 5)
    assert not has_capacity(event, 6)


def test_capacity_without_event():
    assert not has_capacity(None, 0)
