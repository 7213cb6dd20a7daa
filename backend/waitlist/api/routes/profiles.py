"""
Profile and notification inbox endpoints for the calling participant.
"""

from fastapi import APIRouter, Depends, status

from waitlist.api.deps import get_participant_id, get_profile_store
from waitlist.schemas.profile import NotificationEntry, Profile, ProfileRegistration
from waitlist.services.profile_service import delete_profile, register_profile
from waitlist.services.profile_store import ProfileStore

router = APIRouter(prefix="/profiles/me", tags=["Profiles"])


@router.put("", response_model=Profile)
async def register(
    registration: ProfileRegistration,
    participant_id: str = Depends(get_participant_id),
    profiles: ProfileStore = Depends(get_profile_store),
):
    """Create or update the caller's profile and mark it registered."""
    return await register_profile(profiles, participant_id, registration)


@router.get("", response_model=Profile)
async def get_profile(
    participant_id: str = Depends(get_participant_id),
    profiles: ProfileStore = Depends(get_profile_store),
):
    return await profiles.get_profile(participant_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete(
    participant_id: str = Depends(get_participant_id),
    profiles: ProfileStore = Depends(get_profile_store),
):
    """Clear personal details. Event history and notifications are kept."""
    await delete_profile(profiles, participant_id)


@router.get("/notifications", response_model=list[NotificationEntry])
async def list_notifications(
    participant_id: str = Depends(get_participant_id),
    profiles: ProfileStore = Depends(get_profile_store),
):
    return await profiles.list_notifications(participant_id)


@router.post("/notifications/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_read(
    notification_id: str,
    participant_id: str = Depends(get_participant_id),
    profiles: ProfileStore = Depends(get_profile_store),
):
    await profiles.mark_notification_read(participant_id, notification_id)
