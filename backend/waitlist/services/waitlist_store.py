"""
Per-event membership sets with atomic cross-set moves.

ATOMICITY STRATEGY: MULTI/EXEC batches, WATCH where a move must verify
=====================================================================

Problem:
  An entrant moves between five sets (waiting, winners, replacementPool,
  accepted, cancelled). A move is a delete from one hash and an insert into
  another. Done as two writes, a reader can observe the entrant in no set
  (between the writes) or in two (if the second write lands first elsewhere).

Solution:
  Every move is queued on a transactional pipeline and committed with a single
  MULTI/EXEC, so readers see either the old placement or the new one.

  Moves that are only legal from a given set (promote from the pool, and the
  guarded winner response) WATCH the source hash before checking it:

  1. WATCH the source hash
  2. HEXISTS to confirm the entrant is there, else InvalidStateError
  3. MULTI, HDEL source, HSET target, EXEC
  4. If EXEC aborts with WatchError the hash changed underneath us -> retry

  Conflicts retry up to STORE_MAX_RETRY_ATTEMPTS, then surface as StoreError
  so the caller can decide whether to try again.

Each hash maps participant_id -> JSON record whose timestamp key names the
state (requestTime, invitedAt, addedToPoolAt, respondedAt).
"""

import json
from datetime import datetime
from typing import Iterable, Optional

import redis.asyncio as redis
from redis.exceptions import WatchError

from waitlist.core.config import get_settings
from waitlist.core.exceptions import InvalidArgumentError, InvalidStateError, StoreError
from waitlist.core.logging import get_logger
from waitlist.infrastructure.keys import membership_key
from waitlist.infrastructure.redis_client import translate_store_errors
from waitlist.schemas.membership import MembershipRecord, MembershipSet

logger = get_logger(__name__)


def _require(value: Optional[str], name: str) -> None:
    if value is None or not str(value).strip():
        raise InvalidArgumentError(f"{name} is empty")


def _encode(set_name: MembershipSet, participant_id: str, at: datetime,
            is_replacement: Optional[bool] = None) -> str:
    data = {"participantId": participant_id, set_name.timestamp_field: at.isoformat()}
    if is_replacement is not None:
        data["isReplacement"] = is_replacement
    return json.dumps(data)


def _decode(set_name: MembershipSet, participant_id: str, raw: str) -> MembershipRecord:
    data = json.loads(raw)
    return MembershipRecord(
        participant_id=data.get("participantId", participant_id),
        timestamp=datetime.fromisoformat(data[set_name.timestamp_field]),
        is_replacement=bool(data.get("isReplacement", False)),
    )


class WaitlistStore:
    """Redis-backed waitlist sets for every event."""

    def __init__(self, client: redis.Redis):
        self.redis = client
        self.max_retry_attempts = get_settings().STORE_MAX_RETRY_ATTEMPTS

    @translate_store_errors
    async def is_in_set(self, event_id: str, participant_id: str, set_name: MembershipSet) -> bool:
        _require(event_id, "eventId")
        _require(participant_id, "participantId")
        return bool(await self.redis.hexists(membership_key(event_id, set_name.value), participant_id))

    @translate_store_errors
    async def membership_of(self, event_id: str, participant_id: str) -> list[MembershipSet]:
        """All sets holding the participant, read in one consistent snapshot."""
        _require(event_id, "eventId")
        _require(participant_id, "participantId")
        async with self.redis.pipeline(transaction=True) as pipe:
            for set_name in MembershipSet:
                pipe.hexists(membership_key(event_id, set_name.value), participant_id)
            found = await pipe.execute()
        return [set_name for set_name, present in zip(MembershipSet, found) if present]

    @translate_store_errors
    async def count_waiting(self, event_id: str) -> int:
        _require(event_id, "eventId")
        return int(await self.redis.hlen(membership_key(event_id, MembershipSet.WAITING.value)))

    @translate_store_errors
    async def add_to_waiting(self, event_id: str, participant_id: str, request_time: datetime) -> None:
        """
        Idempotent upsert into the waiting set.
        A previous cancelled record is cleared in the same batch so a
        re-joining entrant never sits in two sets.
        """
        _require(event_id, "eventId")
        _require(participant_id, "participantId")
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.hdel(membership_key(event_id, MembershipSet.CANCELLED.value), participant_id)
            pipe.hset(
                membership_key(event_id, MembershipSet.WAITING.value),
                participant_id,
                _encode(MembershipSet.WAITING, participant_id, request_time),
            )
            await pipe.execute()

    @translate_store_errors
    async def remove_from_waiting(self, event_id: str, participant_id: str) -> None:
        """Idempotent: removing an absent entrant is not an error."""
        _require(event_id, "eventId")
        _require(participant_id, "participantId")
        await self.redis.hdel(membership_key(event_id, MembershipSet.WAITING.value), participant_id)

    @translate_store_errors
    async def move_to_winners_and_pool(
        self,
        event_id: str,
        winner_ids: list[str],
        replacement_ids: list[str],
        now: datetime,
    ) -> None:
        """Commit a draw: waiting -> winners / replacementPool, all or nothing."""
        _require(event_id, "eventId")
        if not winner_ids:
            raise InvalidArgumentError("winnerIds is empty")

        waiting = membership_key(event_id, MembershipSet.WAITING.value)
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.hdel(waiting, *winner_ids, *replacement_ids)
            pipe.hset(
                membership_key(event_id, MembershipSet.WINNERS.value),
                mapping={
                    pid: _encode(MembershipSet.WINNERS, pid, now, is_replacement=False)
                    for pid in winner_ids
                },
            )
            if replacement_ids:
                pipe.hset(
                    membership_key(event_id, MembershipSet.REPLACEMENT_POOL.value),
                    mapping={
                        pid: _encode(MembershipSet.REPLACEMENT_POOL, pid, now)
                        for pid in replacement_ids
                    },
                )
            await pipe.execute()

        logger.info(
            "draw_committed",
            event_id=event_id,
            winners=len(winner_ids),
            replacements=len(replacement_ids),
        )

    async def _guarded_move(
        self,
        event_id: str,
        participant_id: str,
        source: MembershipSet,
        target: MembershipSet,
        record: str,
        not_in_source_message: str,
    ) -> None:
        source_key = membership_key(event_id, source.value)
        target_key = membership_key(event_id, target.value)

        for attempt in range(1, self.max_retry_attempts + 1):
            async with self.redis.pipeline(transaction=True) as pipe:
                try:
                    await pipe.watch(source_key)
                    if not await pipe.hexists(source_key, participant_id):
                        raise InvalidStateError(not_in_source_message)
                    pipe.multi()
                    pipe.hdel(source_key, participant_id)
                    pipe.hset(target_key, participant_id, record)
                    await pipe.execute()
                    return
                except WatchError:
                    logger.info(
                        "membership_move_retry",
                        event_id=event_id,
                        participant_id=participant_id,
                        source=source.value,
                        target=target.value,
                        attempt=attempt,
                    )

        raise StoreError(f"{source.value} changed concurrently. Please try again.")

    @translate_store_errors
    async def promote_replacement(self, event_id: str, participant_id: str, now: datetime) -> None:
        """replacementPool -> winners, flagged isReplacement."""
        _require(event_id, "eventId")
        _require(participant_id, "participantId")
        await self._guarded_move(
            event_id,
            participant_id,
            MembershipSet.REPLACEMENT_POOL,
            MembershipSet.WINNERS,
            _encode(MembershipSet.WINNERS, participant_id, now, is_replacement=True),
            "Entrant not in replacement pool",
        )
        logger.info("replacement_promoted", event_id=event_id, participant_id=participant_id)

    @translate_store_errors
    async def resolve_winner_response(
        self,
        event_id: str,
        participant_id: str,
        accepted: bool,
        now: datetime,
        require_winner: Optional[bool] = None,
    ) -> None:
        """
        winners -> accepted (or cancelled).

        With require_winner off this is a blind delete+insert and trusts the
        notification flow to only offer the choice to current winners.
        """
        _require(event_id, "eventId")
        _require(participant_id, "participantId")
        if require_winner is None:
            require_winner = get_settings().ENFORCE_WINNER_ON_RESPONSE

        target = MembershipSet.ACCEPTED if accepted else MembershipSet.CANCELLED
        record = _encode(target, participant_id, now)

        if require_winner:
            await self._guarded_move(
                event_id,
                participant_id,
                MembershipSet.WINNERS,
                target,
                record,
                "Entrant is not awaiting a response for this event",
            )
        else:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.hdel(membership_key(event_id, MembershipSet.WINNERS.value), participant_id)
                pipe.hset(membership_key(event_id, target.value), participant_id, record)
                await pipe.execute()

        logger.info(
            "winner_response_resolved",
            event_id=event_id,
            participant_id=participant_id,
            target=target.value,
        )

    @translate_store_errors
    async def list_set(self, event_id: str, set_name: MembershipSet) -> list[MembershipRecord]:
        """Records ordered by (timestamp, participant_id)."""
        _require(event_id, "eventId")
        raw = await self.redis.hgetall(membership_key(event_id, set_name.value))
        records = [_decode(set_name, pid, value) for pid, value in raw.items()]
        records.sort(key=lambda r: (r.timestamp, r.participant_id))
        return records

    async def list_waiting(self, event_id: str) -> list[MembershipRecord]:
        return await self.list_set(event_id, MembershipSet.WAITING)

    async def list_winners(self, event_id: str) -> list[MembershipRecord]:
        return await self.list_set(event_id, MembershipSet.WINNERS)

    async def list_replacement_pool(self, event_id: str) -> list[MembershipRecord]:
        return await self.list_set(event_id, MembershipSet.REPLACEMENT_POOL)

    async def list_accepted(self, event_id: str) -> list[MembershipRecord]:
        return await self.list_set(event_id, MembershipSet.ACCEPTED)

    async def list_cancelled(self, event_id: str) -> list[MembershipRecord]:
        return await self.list_set(event_id, MembershipSet.CANCELLED)


def participant_ids(records: Iterable[MembershipRecord]) -> list[str]:
    return [r.participant_id for r in records]
