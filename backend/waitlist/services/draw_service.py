"""
Lottery draw engine.

DRAW ALGORITHM
==============

  1. Validate inputs (event id, num_winners > 0, replacement_pool_size >= 0)
  2. Take the event's draw lock (see draw_lock_service)
  3. Read the full waiting list, fail NoEntrantsError if empty
  4. Shuffle uniformly (random.Random.shuffle is Fisher-Yates; the Random
     instance is injectable so tests can seed it)
  5. winners      = shuffled[:min(num_winners, total)]
     replacements = the next min(replacement_pool_size, total - winners)
     everyone else stays in waiting untouched
  6. Commit waiting -> winners / replacementPool in one atomic batch

The draw has succeeded once step 6 commits. Winner notifications go out
afterwards and cannot fail the draw.

NOTIFICATION FAN-OUT
====================

Each winner is first checked for an existing `winner` notification for this
event and skipped if one exists, so re-running dispatch for the same winners
never double-notifies. If the check itself fails for a winner we send anyway:
a duplicate is better than a missed invitation.

Sends run concurrently and are gathered with return_exceptions=True, which is
the barrier: the DispatchReport is built only after every send has either
succeeded or failed. Failures are counted and logged, never raised.
"""

import asyncio
import random
import time
from datetime import datetime, timezone
from typing import Optional, Sequence

from waitlist.core.config import get_settings
from waitlist.core.exceptions import (
    DrawInProgressError,
    EmptyPoolError,
    InvalidArgumentError,
    NoEntrantsError,
    StoreError,
    WaitlistError,
)
from waitlist.core.logging import get_logger
from waitlist.core.metrics import draw_latency, record_draw, record_notification, replacement_promotions
from waitlist.schemas.membership import DispatchReport, DrawResult, PromotionResult
from waitlist.schemas.profile import NotificationCategory
from waitlist.services.interfaces import DrawLock, NoDrawLock
from waitlist.services.profile_store import ProfileStore
from waitlist.services.waitlist_store import WaitlistStore, participant_ids

logger = get_logger(__name__)

WINNER_MESSAGE = "Congratulations! You won. Proceed to signup."
CANCELLED_MESSAGE = "Your invitation for this event has been cancelled."


def select_winners(
    entrant_ids: Sequence[str],
    num_winners: int,
    replacement_pool_size: int,
    rng: random.Random,
) -> tuple[list[str], list[str]]:
    """Partition a uniformly shuffled copy of `entrant_ids` into winners and replacements."""
    shuffled = list(entrant_ids)
    rng.shuffle(shuffled)

    total = len(shuffled)
    winner_count = min(num_winners, total)
    replacement_count = min(replacement_pool_size, total - winner_count)

    winners = shuffled[:winner_count]
    replacements = shuffled[winner_count:winner_count + replacement_count]
    return winners, replacements


def _raise_if_cancelled(outcome: object) -> None:
    # gather(return_exceptions=True) also hands back CancelledError and friends
    if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
        raise outcome


class DrawEngine:
    def __init__(
        self,
        waitlists: WaitlistStore,
        profiles: ProfileStore,
        draw_lock: Optional[DrawLock] = None,
        rng: Optional[random.Random] = None,
    ):
        settings = get_settings()
        self.waitlists = waitlists
        self.profiles = profiles
        self.draw_lock = draw_lock or NoDrawLock()
        self.rng = rng or random.Random(settings.DRAW_RANDOM_SEED)
        self.default_replacement_pool_size = settings.DEFAULT_REPLACEMENT_POOL_SIZE

    async def entrant_count(self, event_id: str) -> int:
        return await self.waitlists.count_waiting(event_id)

    async def run_draw(
        self,
        event_id: str,
        num_winners: int,
        replacement_pool_size: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> DrawResult:
        if replacement_pool_size is None:
            replacement_pool_size = self.default_replacement_pool_size

        if not event_id:
            raise InvalidArgumentError("eventId is empty")
        if num_winners <= 0:
            raise InvalidArgumentError("Number of winners must be > 0")
        if replacement_pool_size < 0:
            raise InvalidArgumentError("Replacement pool size cannot be negative")

        now = now or datetime.now(timezone.utc)
        start = time.perf_counter()

        try:
            async with self.draw_lock.held(event_id):
                waiting = await self.waitlists.list_waiting(event_id)
                if not waiting:
                    raise NoEntrantsError()

                winners, replacements = select_winners(
                    participant_ids(waiting), num_winners, replacement_pool_size, self.rng
                )
                await self.waitlists.move_to_winners_and_pool(event_id, winners, replacements, now)
        except StoreError:
            record_draw("error")
            raise
        except (NoEntrantsError, DrawInProgressError):
            record_draw("rejected")
            raise

        draw_latency.observe(time.perf_counter() - start)
        record_draw("success")
        logger.info(
            "draw_completed",
            event_id=event_id,
            entrants=len(waiting),
            winners=len(winners),
            replacements=len(replacements),
            remaining=len(waiting) - len(winners) - len(replacements),
        )

        report = await self.dispatch_winner_notifications(event_id, winners, now)
        return DrawResult(
            event_id=event_id,
            winners=winners,
            replacements=replacements,
            notifications=report,
        )

    async def dispatch_winner_notifications(
        self,
        event_id: str,
        winner_ids: Sequence[str],
        now: Optional[datetime] = None,
    ) -> DispatchReport:
        """Notify winners who have not yet received a winner notification for this event."""
        if not winner_ids:
            return DispatchReport()
        now = now or datetime.now(timezone.utc)

        checks = await asyncio.gather(
            *(
                self.profiles.has_notification(pid, event_id, NotificationCategory.WINNER.value)
                for pid in winner_ids
            ),
            return_exceptions=True,
        )

        to_notify: list[str] = []
        skipped = 0
        for pid, already_notified in zip(winner_ids, checks):
            _raise_if_cancelled(already_notified)
            if isinstance(already_notified, Exception):
                logger.warning(
                    "notification_check_failed_sending_anyway",
                    event_id=event_id,
                    participant_id=pid,
                    error=str(already_notified),
                )
                to_notify.append(pid)
            elif already_notified:
                skipped += 1
            else:
                to_notify.append(pid)

        record_notification(NotificationCategory.WINNER.value, "skipped", skipped)
        report = await self._fan_out(event_id, to_notify, WINNER_MESSAGE, NotificationCategory.WINNER, now)
        report.skipped = skipped
        return report

    async def notify_cancelled(self, event_id: str, now: Optional[datetime] = None) -> DispatchReport:
        """Send the cancellation message to everyone in the cancelled set."""
        if not event_id:
            raise InvalidArgumentError("eventId is empty")
        cancelled = await self.waitlists.list_cancelled(event_id)
        return await self._fan_out(
            event_id,
            participant_ids(cancelled),
            CANCELLED_MESSAGE,
            NotificationCategory.CANCELLED,
            now or datetime.now(timezone.utc),
        )

    async def _fan_out(
        self,
        event_id: str,
        recipients: Sequence[str],
        message: str,
        category: NotificationCategory,
        now: datetime,
    ) -> DispatchReport:
        if not recipients:
            return DispatchReport()

        results = await asyncio.gather(
            *(
                self.profiles.add_notification(pid, event_id, message, category.value, now)
                for pid in recipients
            ),
            return_exceptions=True,
        )

        sent = failed = 0
        for pid, result in zip(recipients, results):
            _raise_if_cancelled(result)
            if isinstance(result, Exception):
                failed += 1
                logger.error(
                    "notification_send_failed",
                    event_id=event_id,
                    participant_id=pid,
                    category=category.value,
                    error=str(result),
                )
            else:
                sent += 1

        record_notification(category.value, "sent", sent)
        record_notification(category.value, "failed", failed)
        logger.info(
            "notifications_dispatched",
            event_id=event_id,
            category=category.value,
            sent=sent,
            failed=failed,
        )
        return DispatchReport(sent=sent, failed=failed)

    async def promote_from_cancelled(
        self,
        event_id: str,
        participant_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> PromotionResult:
        """
        Fill a declined spot from the replacement pool.

        With no participant given, the first pool entry in store order is
        promoted; the pool is not re-shuffled. The promoted entrant is sent the
        winner notification, and a failed send does not undo the promotion.
        """
        if not event_id:
            raise InvalidArgumentError("eventId is empty")
        now = now or datetime.now(timezone.utc)

        if not participant_id:
            pool = await self.waitlists.list_replacement_pool(event_id)
            if not pool:
                raise EmptyPoolError()
            participant_id = pool[0].participant_id

        try:
            await self.waitlists.promote_replacement(event_id, participant_id, now)
        except WaitlistError:
            logger.warning("replacement_promotion_failed", event_id=event_id, participant_id=participant_id)
            raise
        replacement_promotions.inc()

        report = await self.dispatch_winner_notifications(event_id, [participant_id], now)
        return PromotionResult(
            event_id=event_id,
            participant_id=participant_id,
            notified=report.sent > 0,
        )
