"""
Profile registration and deletion.
"""

from datetime import datetime, timezone
from typing import Optional

from waitlist.core.exceptions import InvalidArgumentError, NotFoundError
from waitlist.core.logging import get_logger
from waitlist.schemas.profile import Profile, ProfileRegistration, ProfileUpdate
from waitlist.services.profile_store import ProfileStore

logger = get_logger(__name__)


async def register_profile(
    store: ProfileStore,
    participant_id: str,
    registration: ProfileRegistration,
    now: Optional[datetime] = None,
) -> Profile:
    """
    Create or refresh a participant's profile and mark it registered.
    Email syntax is already enforced by ProfileRegistration.
    """
    if not participant_id or not participant_id.strip():
        raise InvalidArgumentError("Participant ID is required")
    display_name = (registration.display_name or "").strip()
    if not display_name:
        raise InvalidArgumentError("Name is required")

    now = now or datetime.now(timezone.utc)
    try:
        existing = await store.get_profile(participant_id)
        created_at = existing.created_at or now
    except NotFoundError:
        created_at = now

    await store.upsert_profile(
        participant_id,
        ProfileUpdate(
            display_name=display_name,
            email=str(registration.email).strip(),
            phone=(registration.phone or "").strip(),
            registered=True,
            created_at=created_at,
        ),
    )
    logger.info("profile_registered", participant_id=participant_id)
    return await store.get_profile(participant_id)


async def delete_profile(store: ProfileStore, participant_id: str, now: Optional[datetime] = None) -> None:
    if not participant_id or not participant_id.strip():
        raise InvalidArgumentError("Participant ID is required")
    await store.clear_profile(participant_id, now or datetime.now(timezone.utc))
