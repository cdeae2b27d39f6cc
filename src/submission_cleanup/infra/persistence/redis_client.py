"""Lazily connected ``redis.asyncio`` client.

Example:
    >>> factory = RedisFactory.from_env()
    >>> client = await factory.get_client()
    >>> await client.ping()
    True
"""

from __future__ import annotations

from typing import Any

import redis.asyncio as aioredis

from submission_cleanup.infra.persistence.redis_settings import RedisSettings


class RedisFactory:
    """Owns one Redis client for the app's lifetime; closed by the lifespan hook."""

    def __init__(self, settings: RedisSettings) -> None:
        self._settings = settings
        self._client: aioredis.Redis | None = None

    @classmethod
    def from_env(cls) -> RedisFactory:
        return cls(RedisSettings())

    @property
    def settings(self) -> RedisSettings:
        return self._settings

    async def get_client(self) -> Any:
        """Client for the configured URL, created on first use."""
        if self._client is None:
            self._client = aioredis.from_url(  # type: ignore[no-untyped-call]
                self._settings.get_url(),
                socket_timeout=self._settings.socket_timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
