"""Submission clean-up settings.

Loaded from environment variables with the ``CLEANUP_`` prefix.

Environment Variables:
    CLEANUP_PARTITION_GRAPH_TEMPLATE: Named-graph IRI template of a tenant partition
    CLEANUP_PARTITION_PLACEHOLDER: Token replaced by the organization id
    CLEANUP_SHARE_ROOT: Mount point of the ``share://`` file volume
    CLEANUP_CREDENTIAL_GRAPH: Graph holding vendor credentials
    CLEANUP_ERROR_GRAPH: Graph receiving error alert records
    CLEANUP_ERROR_CREATOR: Creator IRI stamped on error alert records
    CLEANUP_DELETION_TIMEOUT_SECONDS: Deadline for one deletion (0 disables it)
    CLEANUP_LOCK_BACKEND: ``memory`` (single replica) or ``redis``
    CLEANUP_LOCK_TIMEOUT_SECONDS: Expiry of a held Redis lock
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PARTITION_PLACEHOLDER = "~ORGANIZATION_ID~"
DEFAULT_PARTITION_GRAPH_TEMPLATE = (
    f"http://mu.semte.ch/graphs/organizations/{DEFAULT_PARTITION_PLACEHOLDER}"
    "/LoketLB-toezichtGebruiker"
)


class CleanupSettings(BaseSettings):
    """Deletion engine configuration.

    Example:
        >>> settings = CleanupSettings()
        >>> settings.lock_backend
        'memory'
    """

    model_config = SettingsConfigDict(
        env_prefix="CLEANUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    partition_graph_template: str = Field(default=DEFAULT_PARTITION_GRAPH_TEMPLATE)
    partition_placeholder: str = Field(default=DEFAULT_PARTITION_PLACEHOLDER, min_length=1)
    share_root: str = Field(default="/share")
    credential_graph: str = Field(default="http://mu.semte.ch/graphs/automatic-submission")
    error_graph: str = Field(default="http://mu.semte.ch/graphs/error")
    error_creator: str = Field(
        default="http://lblod.data.gift/services/clean-up-submission-service",
    )
    deletion_timeout_seconds: float = Field(
        default=300.0,
        ge=0,
        description="Deadline for one deletion in seconds; 0 disables the deadline",
    )
    lock_backend: Literal["memory", "redis"] = Field(default="memory")
    lock_timeout_seconds: float = Field(
        default=600.0,
        gt=0,
        description="Expiry of a Redis submission lock; must exceed the deletion deadline",
    )

    @property
    def deletion_deadline(self) -> float | None:
        """Deletion deadline in seconds, or ``None`` when disabled."""
        return self.deletion_timeout_seconds or None


@lru_cache(maxsize=1)
def get_cleanup_settings() -> CleanupSettings:
    """Get singleton CleanupSettings instance.

    Clear cache with ``get_cleanup_settings.cache_clear()`` for testing.
    """
    return CleanupSettings()
