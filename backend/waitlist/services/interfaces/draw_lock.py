"""
Draw lock strategy interface.
Allows swapping between different approaches to concurrent draws on one event.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class DrawLock(ABC):
    """
    Interface for per-event draw exclusion.

    Implementations:
    - RedisDrawLock: advisory lock in the store, second draw fails fast
    - NoDrawLock: no exclusion, concurrent draws race on the waiting list
    """

    @abstractmethod
    def held(self, event_id: str) -> AbstractAsyncContextManager[None]:
        """
        Hold the draw lock for `event_id` for the duration of the block.

        Raises:
            DrawInProgressError: another draw already holds the lock
        """
