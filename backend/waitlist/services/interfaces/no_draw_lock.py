"""
No-op draw lock - draws are not mutually excluded.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from waitlist.services.interfaces.draw_lock import DrawLock


class NoDrawLock(DrawLock):
    """
    Never blocks. Two simultaneous draws can read the same waiting list and
    both commit, double-allocating entrants.

    Use when:
    - A single organizer client drives draws one at a time
    - The store does not support the lock primitive
    """

    @asynccontextmanager
    async def held(self, event_id: str) -> AsyncIterator[None]:
        yield
