"""
Redis-backed draw lock. Implements DrawLock.

Two organizers (or a double-tapped button) can start a draw on the same event
at once. Both would read the same waiting list and commit overlapping winner
sets. The lock is a compare-and-set flag written before the waiting list is
read:

  SET {prefix}:event:{id}:draw-lock <token> NX PX <timeout>

The second draw sees the key and fails fast with DrawInProgressError rather
than queueing. Release only deletes the key if it still holds our token, so a
draw that outlived its timeout cannot free a lock someone else now owns. The
timeout bounds how long a crashed draw can block the event.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import redis.asyncio as redis
from redis.exceptions import LockError, RedisError

from waitlist.core.config import get_settings
from waitlist.core.exceptions import DrawInProgressError
from waitlist.core.logging import get_logger
from waitlist.core.metrics import draw_lock_contention, record_store_error
from waitlist.infrastructure.keys import draw_lock_key
from waitlist.infrastructure.redis_client import translate_store_errors
from waitlist.services.interfaces.draw_lock import DrawLock

logger = get_logger(__name__)


class RedisDrawLock(DrawLock):
    def __init__(self, client: redis.Redis, timeout: Optional[int] = None):
        self.redis = client
        self.timeout = timeout if timeout is not None else get_settings().DRAW_LOCK_TIMEOUT

    @translate_store_errors
    async def _acquire(self, lock) -> bool:
        return await lock.acquire()

    @asynccontextmanager
    async def held(self, event_id: str) -> AsyncIterator[None]:
        lock = self.redis.lock(draw_lock_key(event_id), timeout=self.timeout, blocking=False)
        if not await self._acquire(lock):
            draw_lock_contention.inc()
            logger.warning("draw_lock_busy", event_id=event_id)
            raise DrawInProgressError()
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Timed out mid-draw; the key is gone or belongs to another draw
                logger.warning("draw_lock_expired_before_release", event_id=event_id, timeout=self.timeout)
            except RedisError as e:
                # The key expires on its own; the guarded block has already finished
                logger.error("draw_lock_release_failed", event_id=event_id, error=str(e))
                record_store_error("release_draw_lock")
