"""Per-submission mutual exclusion.

Two deletions of the same submission must not interleave. A single replica
serializes them with an in-process lock registry; several replicas share a
Redis lock keyed by the submission id.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from redis.exceptions import LockError

from submission_cleanup.foundation.domain.exceptions import ConflictError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from contextlib import AbstractAsyncContextManager

    from submission_cleanup.infra.persistence import RedisFactory

logger = logging.getLogger(__name__)


@runtime_checkable
class SubmissionLockProvider(Protocol):
    """Hands out an exclusive hold on one submission id."""

    def hold(self, submission_id: str) -> AbstractAsyncContextManager[None]:
        """Async context manager held for the whole deletion."""
        ...


class InMemorySubmissionLocks:
    """``asyncio.Lock`` registry for a single process.

    Locks are created on demand and dropped once nobody holds or awaits them.
    A second caller waits for the first to finish.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, submission_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(submission_id, asyncio.Lock())
        self._users[submission_id] = self._users.get(submission_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[submission_id] -= 1
            if not self._users[submission_id]:
                del self._users[submission_id]
                del self._locks[submission_id]


class RedisSubmissionLocks:
    """Redis-backed lock shared by all replicas.

    The lock expires after ``timeout`` seconds so a crashed replica cannot
    block a submission forever. A caller that cannot obtain the lock within
    ``blocking_timeout`` gets a :class:`ConflictError`.

    Args:
        factory: Redis client factory.
        timeout: Lock expiry in seconds.
        blocking_timeout: How long to wait for a held lock.
    """

    def __init__(
        self,
        factory: RedisFactory,
        *,
        timeout: float,
        blocking_timeout: float = 5.0,
    ) -> None:
        self._factory = factory
        self._timeout = timeout
        self._blocking_timeout = blocking_timeout

    def key_for(self, submission_id: str) -> str:
        return f"{self._factory.settings.lock_prefix}{submission_id}"

    @asynccontextmanager
    async def hold(self, submission_id: str) -> AsyncIterator[None]:
        client = await self._factory.get_client()
        lock = client.lock(
            self.key_for(submission_id),
            timeout=self._timeout,
            blocking_timeout=self._blocking_timeout,
        )
        if not await lock.acquire():
            raise ConflictError(
                "A deletion of this submission is already in progress",
                submission_id=submission_id,
            )
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                logger.warning(
                    "submission_lock_expired",
                    extra={"submission_id": submission_id, "timeout": self._timeout},
                )
