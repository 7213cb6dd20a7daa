"""
Draw lock strategy factory.
Configures how concurrent draws on one event are handled.
"""

import redis.asyncio as redis

from waitlist.core.config import get_settings
from waitlist.services.draw_lock_service import RedisDrawLock
from waitlist.services.interfaces.draw_lock import DrawLock
from waitlist.services.interfaces.no_draw_lock import NoDrawLock


def get_draw_lock(client: redis.Redis) -> DrawLock:
    """
    Get configured draw lock.

    - redis (default): RedisDrawLock, second concurrent draw is rejected
    - none: NoDrawLock, concurrent draws are not excluded

    Selected by the DRAW_LOCK_STRATEGY env var.
    """
    strategy = get_settings().DRAW_LOCK_STRATEGY

    if strategy == "none":
        return NoDrawLock()
    return RedisDrawLock(client)
