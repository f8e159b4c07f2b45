"""
Distributed lock.

Redis lock used to keep month-end jobs and order commission runs from
overlapping across workers. Built on redis-py's ``Lock``, which stores a
per-holder token and releases only while that token still matches.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import LockError

from app.config.operational_constants import (
    BLOCKING_TIMEOUT_DEFAULT,
    LOCK_TIMEOUT_SHORT,
)


class DistributedLock:
    """Lock shared between workers through Redis."""

    def __init__(self, redis_client: redis.Redis, prefix: str = "lock:") -> None:
        self.redis_client = redis_client
        self.prefix = prefix

    @asynccontextmanager
    async def lock(
        self,
        key: str,
        timeout: int = LOCK_TIMEOUT_SHORT,
        blocking: bool = True,
        blocking_timeout: float = BLOCKING_TIMEOUT_DEFAULT,
    ) -> AsyncIterator[bool]:
        """
        Acquire lock for ``key``.

        Yields True when the lock was acquired, False otherwise. The
        caller decides whether to skip the work.

        Args:
            key: Lock name
            timeout: Lock expiry in seconds
            blocking: Wait for the lock instead of failing fast
            blocking_timeout: Maximum wait in seconds
        """
        full_key = f"{self.prefix}{key}"
        held = self.redis_client.lock(
            full_key,
            timeout=timeout,
            blocking=blocking,
            blocking_timeout=blocking_timeout,
        )
        acquired = await held.acquire()
        logger.debug(f"Lock {'acquired' if acquired else 'busy'}: {full_key}")
        try:
            yield acquired
        finally:
            if acquired:
                try:
                    await held.release()
                except LockError as e:
                    # Expired and possibly taken over by another worker
                    logger.warning(f"Failed to release lock {full_key}: {e}")


def get_distributed_lock(redis_client: redis.Redis) -> DistributedLock:
    return DistributedLock(redis_client=redis_client)
