"""
Redis client for the waitlist store.
Separated from business logic so stores only see an async client.

Redis is the system of record here, not a cache: if it is unreachable every
store operation fails with StoreError and the caller decides whether to retry.
"""

import functools
from typing import Awaitable, Callable, Optional, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from waitlist.core.config import get_settings
from waitlist.core.exceptions import StoreError
from waitlist.core.logging import get_logger
from waitlist.core.metrics import record_store_error

logger = get_logger(__name__)

T = TypeVar("T")

_redis_client: Optional[redis.Redis] = None


async def get_redis() -> redis.Redis:
    """Get or create the shared Redis connection."""
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        try:
            await client.ping()
        except RedisError as e:
            logger.error("redis_connection_failed", url=settings.REDIS_URL, error=str(e))
            await client.aclose()
            record_store_error("connect")
            raise StoreError() from e
        logger.info("redis_connected", url=settings.REDIS_URL)
        _redis_client = client

    return _redis_client


async def close_redis() -> None:
    """Close Redis connection on shutdown."""
    global _redis_client
    if _redis_client:
        await _redis_client.aclose()
        _redis_client = None


def translate_store_errors(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Surface client failures (connectivity, permission, timeouts) as StoreError."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> T:
        try:
            return await func(*args, **kwargs)
        except RedisError as e:
            logger.error("store_operation_failed", operation=func.__name__, error=str(e))
            record_store_error(func.__name__)
            raise StoreError() from e

    return wrapper
