"""
Winner accept/decline handling.

A response is two independent writes: the membership move (winners ->
accepted/cancelled) and the acknowledgement on the originating notification.
They are not one transaction. If the second write fails after the first has
landed, the move stands and the result says so
(ResponseStatus.NOTIFICATION_UPDATE_FAILED) so the caller can reconcile the
inbox entry instead of retrying the move.
"""

from datetime import datetime, timezone
from typing import Optional

from waitlist.core.exceptions import InvalidArgumentError, NotFoundError, StoreError, WaitlistError
from waitlist.core.logging import get_logger
from waitlist.core.metrics import invitation_responses
from waitlist.schemas.profile import (
    InvitationAnswer,
    InvitationResponseResult,
    NotificationCategory,
    ResponseStatus,
)
from waitlist.services.profile_store import ProfileStore
from waitlist.services.waitlist_store import WaitlistStore

logger = get_logger(__name__)


class InvitationResponseService:
    def __init__(self, waitlists: WaitlistStore, profiles: ProfileStore):
        self.waitlists = waitlists
        self.profiles = profiles

    async def accept(self, event_id: str, participant_id: str, notification_id: str,
                     now: Optional[datetime] = None) -> InvitationResponseResult:
        return await self.respond(event_id, participant_id, notification_id, True, now)

    async def decline(self, event_id: str, participant_id: str, notification_id: str,
                      now: Optional[datetime] = None) -> InvitationResponseResult:
        return await self.respond(event_id, participant_id, notification_id, False, now)

    async def respond(
        self,
        event_id: str,
        participant_id: str,
        notification_id: str,
        accept: bool,
        now: Optional[datetime] = None,
    ) -> InvitationResponseResult:
        """
        Resolve a winner's invitation.

        Raises InvalidArgumentError for missing ids or a notification that is not
        this event's invitation, and InvalidStateError when the participant is
        no longer awaiting a response. Store failures are
        reported on the result, tagged with which step they hit.
        """
        if not event_id:
            raise InvalidArgumentError("eventId is empty")
        if not participant_id:
            raise InvalidArgumentError("participantId is empty")
        if not notification_id:
            raise InvalidArgumentError("notificationId is empty")

        now = now or datetime.now(timezone.utc)
        answer = InvitationAnswer.ACCEPTED if accept else InvitationAnswer.DECLINED

        try:
            await self._check_invitation(event_id, participant_id, notification_id)
            await self.waitlists.resolve_winner_response(event_id, participant_id, accept, now)
        except StoreError as e:
            logger.error(
                "invitation_membership_move_failed",
                event_id=event_id,
                participant_id=participant_id,
                error=e.message,
            )
            return self._result(ResponseStatus.MEMBERSHIP_MOVE_FAILED, event_id, participant_id, answer, e)

        try:
            await self.profiles.update_notification(
                participant_id,
                notification_id,
                {"read": True, "response": answer.value, "responded_at": now},
            )
        except WaitlistError as e:
            logger.error(
                "invitation_notification_update_failed",
                event_id=event_id,
                participant_id=participant_id,
                notification_id=notification_id,
                response=answer.value,
                error=e.message,
            )
            return self._result(ResponseStatus.NOTIFICATION_UPDATE_FAILED, event_id, participant_id, answer, e)

        logger.info(
            "invitation_resolved",
            event_id=event_id,
            participant_id=participant_id,
            response=answer.value,
        )
        return self._result(ResponseStatus.COMPLETED, event_id, participant_id, answer)

    async def _check_invitation(self, event_id: str, participant_id: str, notification_id: str) -> None:
        """
        The notification must be this event's winner invitation. A missing
        entry does not block the move; the acknowledgement step reports it.
        """
        try:
            entry = await self.profiles.get_notification(participant_id, notification_id)
        except NotFoundError:
            return
        if entry.event_id != event_id or entry.category != NotificationCategory.WINNER.value:
            raise InvalidArgumentError("Notification is not an invitation for this event")

    @staticmethod
    def _result(
        status: ResponseStatus,
        event_id: str,
        participant_id: str,
        answer: InvitationAnswer,
        error: Optional[WaitlistError] = None,
    ) -> InvitationResponseResult:
        invitation_responses.labels(response=answer.value, status=status.value).inc()
        return InvitationResponseResult(
            status=status,
            event_id=event_id,
            participant_id=participant_id,
            response=answer,
            error=error.message if error else None,
        )
