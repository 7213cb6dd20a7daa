"""
Tests for the join/leave validation pipeline.
"""

from datetime import datetime, timedelta, timezone

import pytest

from conftest import NOW, ORGANIZER_ID, register_participant
from waitlist.core.exceptions import (
    AlreadyJoinedError,
    EventFullError,
    ForbiddenError,
    InvalidArgumentError,
    NotOnWaitlistError,
    ProfileIncompleteError,
    RegistrationClosedError,
)
from waitlist.schemas.membership import MembershipSet
from waitlist.schemas.profile import ProfileUpdate

AFTER_CLOSE = datetime(2026, 4, 2, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_join_success(join_service, waitlist_store, profile_store, open_event):
    await register_participant(profile_store, "p1")

    await join_service.join(open_event, "p1", NOW)

    assert await waitlist_store.is_in_set(open_event.id, "p1", MembershipSet.WAITING)
    assert await join_service.waiting_count(open_event.id) == 1


@pytest.mark.asyncio
async def test_join_requires_event_and_participant(join_service, open_event):
    with pytest.raises(InvalidArgumentError):
        await join_service.join(None, "p1", NOW)
    with pytest.raises(InvalidArgumentError):
        await join_service.join(open_event, "", NOW)


@pytest.mark.asyncio
async def test_organizer_cannot_join_own_event(join_service, profile_store, open_event):
    """Rejected even though the window is open and there is no capacity limit."""
    await register_participant(profile_store, ORGANIZER_ID)
    with pytest.raises(ForbiddenError):
        await join_service.join(open_event, ORGANIZER_ID, NOW)


@pytest.mark.asyncio
async def test_organizer_rejected_before_profile_check(join_service, open_event):
    """The organizer check runs before the profile lookup."""
    with pytest.raises(ForbiddenError):
        await join_service.join(open_event, ORGANIZER_ID, AFTER_CLOSE)


@pytest.mark.asyncio
async def test_organizer_rejected_when_event_full(join_service, waitlist_store, profile_store, open_event):
    event = open_event.model_copy(update={"max_capacity": 1})
    await waitlist_store.add_to_waiting(event.id, "someone", NOW)
    await register_participant(profile_store, ORGANIZER_ID)

    with pytest.raises(ForbiddenError):
        await join_service.join(event, ORGANIZER_ID, NOW)
    assert await waitlist_store.membership_of(event.id, ORGANIZER_ID) == []


@pytest.mark.asyncio
async def test_join_without_profile(join_service, open_event):
    with pytest.raises(ProfileIncompleteError) as exc_info:
        await join_service.join(open_event, "stranger", NOW)
    assert exc_info.value.requires_registration


@pytest.mark.asyncio
async def test_join_with_unregistered_profile(join_service, profile_store, open_event):
    await profile_store.upsert_profile("p1", ProfileUpdate(display_name="Half done", registered=False))
    with pytest.raises(ProfileIncompleteError):
        await join_service.join(open_event, "p1", NOW)


@pytest.mark.asyncio
async def test_profile_checked_before_window(join_service, open_event):
    with pytest.raises(ProfileIncompleteError):
        await join_service.join(open_event, "stranger", AFTER_CLOSE)


@pytest.mark.asyncio
async def test_join_twice(join_service, profile_store, open_event):
    await register_participant(profile_store, "p1")
    await join_service.join(open_event, "p1", NOW)
    with pytest.raises(AlreadyJoinedError):
        await join_service.join(open_event, "p1", NOW)


@pytest.mark.asyncio
async def test_already_joined_checked_before_window(join_service, profile_store, open_event):
    await register_participant(profile_store, "p1")
    await join_service.join(open_event, "p1", NOW)
    with pytest.raises(AlreadyJoinedError):
        await join_service.join(open_event, "p1", AFTER_CLOSE)


@pytest.mark.asyncio
async def test_join_outside_window(join_service, profile_store, open_event):
    await register_participant(profile_store, "p1")
    with pytest.raises(RegistrationClosedError):
        await join_service.join(open_event, "p1", AFTER_CLOSE)
    with pytest.raises(RegistrationClosedError):
        await join_service.join(open_event, "p1", NOW - timedelta(days=30))


@pytest.mark.asyncio
async def test_join_full_event(join_service, profile_store, open_event):
    event = open_event.model_copy(update={"max_capacity": 2})
    for participant_id in ("p1", "p2", "p3"):
        await register_participant(profile_store, participant_id)

    await join_service.join(event, "p1", NOW)
    await join_service.join(event, "p2", NOW)
    with pytest.raises(EventFullError):
        await join_service.join(event, "p3", NOW)


@pytest.mark.asyncio
async def test_window_checked_before_capacity(join_service, profile_store, waitlist_store, open_event):
    event = open_event.model_copy(update={"max_capacity": 1})
    await waitlist_store.add_to_waiting(event.id, "someone", NOW)
    await register_participant(profile_store, "p1")
    with pytest.raises(RegistrationClosedError):
        await join_service.join(event, "p1", AFTER_CLOSE)


@pytest.mark.asyncio
async def test_join_leave_join_round_trip(join_service, waitlist_store, profile_store, open_event):
    await register_participant(profile_store, "p1")

    await join_service.join(open_event, "p1", NOW)
    await join_service.leave(open_event, "p1")
    assert not await waitlist_store.is_in_set(open_event.id, "p1", MembershipSet.WAITING)

    await join_service.join(open_event, "p1", NOW)
    assert await waitlist_store.membership_of(open_event.id, "p1") == [MembershipSet.WAITING]


@pytest.mark.asyncio
async def test_leave_when_not_on_waitlist(join_service, open_event):
    with pytest.raises(NotOnWaitlistError):
        await join_service.leave(open_event, "p1")


@pytest.mark.asyncio
async def test_leave_requires_participant(join_service, open_event):
    with pytest.raises(InvalidArgumentError):
        await join_service.leave(open_event, None)


@pytest.mark.asyncio
async def test_drawn_entrant_cannot_rejoin(join_service, waitlist_store, profile_store, open_event):
    await register_participant(profile_store, "p1")
    await join_service.join(open_event, "p1", NOW)
    await waitlist_store.move_to_winners_and_pool(open_event.id, ["p1"], [], NOW)

    with pytest.raises(AlreadyJoinedError):
        await join_service.join(open_event, "p1", NOW)
    assert await waitlist_store.membership_of(open_event.id, "p1") == [MembershipSet.WINNERS]


@pytest.mark.asyncio
async def test_cancelled_entrant_can_rejoin(join_service, waitlist_store, profile_store, open_event):
    await register_participant(profile_store, "p1")
    await join_service.join(open_event, "p1", NOW)
    await waitlist_store.move_to_winners_and_pool(open_event.id, ["p1"], [], NOW)
    await waitlist_store.resolve_winner_response(open_event.id, "p1", False, NOW)

    await join_service.join(open_event, "p1", NOW)

    assert await waitlist_store.membership_of(open_event.id, "p1") == [MembershipSet.WAITING]
