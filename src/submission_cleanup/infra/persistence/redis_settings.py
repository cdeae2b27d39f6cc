"""Redis connection settings for the shared submission locks.

Only read when ``CLEANUP_LOCK_BACKEND=redis``; a single replica locks in
process and never connects to Redis.
"""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """``REDIS_*`` environment variables.

    ``REDIS_URL`` wins over the host/port/db/password parts when set.

    Example:
        >>> RedisSettings(host="cache", db=2).get_url()
        'redis://cache:6379/2'
    """

    model_config = SettingsConfigDict(env_prefix="REDIS_", extra="ignore")

    url: str | None = Field(default=None, description="Full URL (redis://host:port/db)")
    host: str = "localhost"
    port: int = Field(default=6379, ge=1, le=65535)
    db: int = Field(default=0, ge=0, le=15)
    password: str | None = Field(default=None, repr=False)
    socket_timeout: float = Field(default=5.0, ge=0.1, description="Seconds")
    lock_prefix: str = Field(
        default="submission-cleanup:lock:",
        description="Prepended to the submission id to form the lock key",
    )

    @classmethod
    def from_url(cls, url: str) -> RedisSettings:
        """Split a ``redis://`` or ``rediss://`` URL into settings.

        Raises:
            ValueError: On another scheme or a non-numeric database path.
        """
        parsed = urlparse(url)
        if parsed.scheme not in ("redis", "rediss"):
            msg = f"Invalid Redis URL scheme: {parsed.scheme}"
            raise ValueError(msg)

        db_path = parsed.path.lstrip("/")
        if db_path and not db_path.isdigit():
            msg = f"Invalid database number in URL path: {parsed.path}"
            raise ValueError(msg)

        return cls(
            url=url,
            host=parsed.hostname or "localhost",
            port=parsed.port or 6379,
            db=int(db_path or 0),
            password=parsed.password,
        )

    def get_url(self) -> str:
        if self.url:
            return self.url
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"
