"""
Tests for profiles and the notification inbox.
"""

from datetime import timedelta

import pytest

from conftest import NOW, register_participant
from waitlist.core.exceptions import InvalidArgumentError, NotFoundError
from waitlist.schemas.profile import InvitationAnswer, ProfileRegistration, ProfileUpdate
from waitlist.services.profile_service import delete_profile, register_profile


@pytest.mark.asyncio
async def test_missing_profile(profile_store):
    with pytest.raises(NotFoundError):
        await profile_store.get_profile("ghost")


@pytest.mark.asyncio
async def test_upsert_merges_fields(profile_store):
    await register_participant(profile_store, "p1")
    await profile_store.upsert_profile("p1", ProfileUpdate(phone="780-555-0101"))

    profile = await profile_store.get_profile("p1")
    assert profile.phone == "780-555-0101"
    assert profile.display_name == "Entrant p1"
    assert profile.email == "p1@example.com"
    assert profile.registered is True
    assert profile.created_at == NOW


@pytest.mark.asyncio
async def test_clear_profile_keeps_record_and_created_at(profile_store):
    await register_participant(profile_store, "p1")

    await profile_store.clear_profile("p1", NOW + timedelta(days=3))

    profile = await profile_store.get_profile("p1")
    assert profile.display_name == ""
    assert profile.email == ""
    assert profile.phone == ""
    assert profile.registered is False
    assert profile.created_at == NOW


@pytest.mark.asyncio
async def test_clear_absent_profile_creates_it(profile_store):
    await profile_store.clear_profile("new", NOW)
    profile = await profile_store.get_profile("new")
    assert profile.registered is False
    assert profile.created_at == NOW


@pytest.mark.asyncio
async def test_register_profile_keeps_first_created_at(profile_store):
    registration = ProfileRegistration(display_name="  Ada  ", email="ada@example.com")
    first = await register_profile(profile_store, "ada", registration, now=NOW)
    again = await register_profile(profile_store, "ada", registration, now=NOW + timedelta(days=1))

    assert first.display_name == "Ada"
    assert again.registered is True
    assert again.created_at == NOW


@pytest.mark.asyncio
async def test_register_profile_requires_name(profile_store):
    with pytest.raises(InvalidArgumentError):
        await register_profile(profile_store, "p1", ProfileRegistration(display_name="  ", email="a@example.com"))


@pytest.mark.asyncio
async def test_delete_profile(profile_store):
    await register_participant(profile_store, "p1")
    await delete_profile(profile_store, "p1", now=NOW)
    assert (await profile_store.get_profile("p1")).registered is False


@pytest.mark.asyncio
async def test_banned_flag(profile_store):
    assert await profile_store.is_banned("nobody") is False
    with pytest.raises(NotFoundError):
        await profile_store.set_banned("nobody", True)

    await register_participant(profile_store, "p1")
    await profile_store.set_banned("p1", True)
    assert await profile_store.is_banned("p1") is True
    assert (await profile_store.get_profile("p1")).banned is True


@pytest.mark.asyncio
async def test_notifications_newest_first(profile_store):
    older = await profile_store.add_notification("p1", "e1", "first", "winner", NOW)
    newer = await profile_store.add_notification("p1", "e2", "second", "cancelled", NOW + timedelta(hours=1))

    entries = await profile_store.list_notifications("p1")
    assert [e.id for e in entries] == [newer, older]
    assert entries[1].read is False
    assert entries[1].response is None


@pytest.mark.asyncio
async def test_has_notification_matches_event_and_category(profile_store):
    await profile_store.add_notification("p1", "e1", "msg", "winner", NOW)
    assert await profile_store.has_notification("p1", "e1", "winner")
    assert not await profile_store.has_notification("p1", "e1", "cancelled")
    assert not await profile_store.has_notification("p1", "e2", "winner")


@pytest.mark.asyncio
async def test_update_notification_partial(profile_store):
    notification_id = await profile_store.add_notification("p1", "e1", "msg", "winner", NOW)

    await profile_store.update_notification(
        "p1", notification_id, {"read": True, "response": "accepted", "responded_at": NOW}
    )

    entry = (await profile_store.list_notifications("p1"))[0]
    assert entry.read is True
    assert entry.response == InvitationAnswer.ACCEPTED
    assert entry.responded_at == NOW
    assert entry.message == "msg"


@pytest.mark.asyncio
async def test_update_notification_rejects_empty_fields(profile_store):
    notification_id = await profile_store.add_notification("p1", "e1", "msg", "winner", NOW)
    with pytest.raises(InvalidArgumentError):
        await profile_store.update_notification("p1", notification_id, {})


@pytest.mark.asyncio
async def test_update_notification_rejects_unknown_fields(profile_store):
    notification_id = await profile_store.add_notification("p1", "e1", "msg", "winner", NOW)
    with pytest.raises(InvalidArgumentError):
        await profile_store.update_notification("p1", notification_id, {"message": "edited"})


@pytest.mark.asyncio
async def test_update_missing_notification(profile_store):
    with pytest.raises(NotFoundError):
        await profile_store.update_notification("p1", "missing", {"read": True})


@pytest.mark.asyncio
async def test_mark_notification_read(profile_store):
    notification_id = await profile_store.add_notification("p1", "e1", "msg", "winner", NOW)
    await profile_store.mark_notification_read("p1", notification_id)
    entry = (await profile_store.list_notifications("p1"))[0]
    assert entry.read is True
    assert entry.response is None


@pytest.mark.asyncio
async def test_get_notification(profile_store):
    notification_id = await profile_store.add_notification("p1", "e1", "msg", "winner", NOW)

    entry = await profile_store.get_notification("p1", notification_id)
    assert entry.event_id == "e1"
    assert entry.category == "winner"

    with pytest.raises(NotFoundError):
        await profile_store.get_notification("p1", "missing")
