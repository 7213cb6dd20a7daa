"""
Waitlist enrollment and withdrawal.

Join runs its checks as an ordered pipeline and stops at the first failure:

  1. event and participant present        InvalidArgumentError
  2. participant is not the organizer     ForbiddenError
  3. profile exists and is registered     ProfileIncompleteError
  4. not already waiting / drawn          AlreadyJoinedError
  5. registration window is open          RegistrationClosedError
  6. waiting list below capacity          EventFullError

Steps 1-2 need no store round trip. The order is part of the contract: an
organizer is turned away even while registration is open and seats remain.
"""

from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from waitlist.core.exceptions import (
    AlreadyJoinedError,
    EventFullError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    NotOnWaitlistError,
    ProfileIncompleteError,
    RegistrationClosedError,
    WaitlistError,
)
from waitlist.core.logging import get_logger
from waitlist.core.metrics import record_waitlist_operation
from waitlist.schemas.event import Event
from waitlist.schemas.membership import MembershipSet
from waitlist.services.profile_store import ProfileStore
from waitlist.services.validation import has_capacity, is_within_registration_window
from waitlist.services.waitlist_store import WaitlistStore

logger = get_logger(__name__)

JoinCheck = Callable[[Event, str, datetime], Awaitable[None]]

# A cancelled entrant may try again; anyone still in play may not
_BLOCKING_SETS = {
    MembershipSet.WINNERS: "You have already been selected for this event",
    MembershipSet.REPLACEMENT_POOL: "You are in the replacement pool for this event",
    MembershipSet.ACCEPTED: "You are already enrolled in this event",
}


def _validate_request(event: Optional[Event], participant_id: Optional[str]) -> None:
    if event is None:
        raise InvalidArgumentError("Event is required")
    if not participant_id:
        raise InvalidArgumentError("Participant ID is required")


class JoinLeaveService:
    def __init__(self, waitlists: WaitlistStore, profiles: ProfileStore):
        self.waitlists = waitlists
        self.profiles = profiles

    async def join(self, event: Optional[Event], participant_id: Optional[str],
                   now: Optional[datetime] = None) -> None:
        try:
            _validate_request(event, participant_id)
            if event.organizer_id and event.organizer_id == participant_id:
                raise ForbiddenError("You cannot join your own event")

            now = now or datetime.now(timezone.utc)
            checks: tuple[JoinCheck, ...] = (
                self._check_profile,
                self._check_not_joined,
                self._check_window,
                self._check_capacity,
            )
            for check in checks:
                await check(event, participant_id, now)

            await self.waitlists.add_to_waiting(event.id, participant_id, now)
        except WaitlistError as e:
            record_waitlist_operation("join", type(e).__name__)
            logger.info("waitlist_join_rejected", event_id=getattr(event, "id", None),
                        participant_id=participant_id, reason=e.message)
            raise

        record_waitlist_operation("join", "success")
        logger.info("waitlist_joined", event_id=event.id, participant_id=participant_id)

    async def _check_profile(self, event: Event, participant_id: str, now: datetime) -> None:
        try:
            profile = await self.profiles.get_profile(participant_id)
        except NotFoundError:
            raise ProfileIncompleteError() from None
        if not profile.registered:
            raise ProfileIncompleteError()

    async def _check_not_joined(self, event: Event, participant_id: str, now: datetime) -> None:
        sets = await self.waitlists.membership_of(event.id, participant_id)
        if MembershipSet.WAITING in sets:
            raise AlreadyJoinedError()
        for set_name in sets:
            if set_name in _BLOCKING_SETS:
                raise AlreadyJoinedError(_BLOCKING_SETS[set_name])

    async def _check_window(self, event: Event, participant_id: str, now: datetime) -> None:
        if not is_within_registration_window(event, now):
            raise RegistrationClosedError()

    async def _check_capacity(self, event: Event, participant_id: str, now: datetime) -> None:
        count = await self.waitlists.count_waiting(event.id)
        if not has_capacity(event, count):
            raise EventFullError()

    async def leave(self, event: Optional[Event], participant_id: Optional[str]) -> None:
        """
        Withdraw from the waiting set. The store removal is idempotent, but the
        service reports NotOnWaitlistError when there was nothing to leave.
        """
        try:
            _validate_request(event, participant_id)
            if not await self.waitlists.is_in_set(event.id, participant_id, MembershipSet.WAITING):
                raise NotOnWaitlistError()
            await self.waitlists.remove_from_waiting(event.id, participant_id)
        except WaitlistError as e:
            record_waitlist_operation("leave", type(e).__name__)
            raise

        record_waitlist_operation("leave", "success")
        logger.info("waitlist_left", event_id=event.id, participant_id=participant_id)

    async def waiting_count(self, event_id: str) -> int:
        return await self.waitlists.count_waiting(event_id)
