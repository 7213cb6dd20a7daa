"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .draw_lock import DrawLock
from .no_draw_lock import NoDrawLock

__all__ = ['DrawLock', 'NoDrawLock']
