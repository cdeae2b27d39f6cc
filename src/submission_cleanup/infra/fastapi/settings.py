"""Application settings for the FastAPI app factory.

Provides Pydantic Settings for FastAPI configuration and auto-discovery
filtering.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_version() -> str:
    """Resolve default app version from package metadata."""
    from importlib.metadata import PackageNotFoundError, version

    try:
        return version("submission-cleanup")
    except PackageNotFoundError:
        return "0.0.0"


class AppSettings(BaseSettings):
    """Application factory settings.

    Environment variables use the ``APP_`` prefix (e.g., ``APP_TITLE``).
    ``APP_EXCLUDE_GROUPS`` and ``APP_EXCLUDE_ENTRY_POINTS`` take JSON lists.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        extra="ignore",
    )

    title: str = Field(default="Clean-up Submission Service")
    version: str = Field(default_factory=_default_version)
    description: str = Field(
        default="Deletes unsent submissions together with their files and harvesting records",
    )
    docs_url: str | None = Field(default="/docs")
    redoc_url: str | None = Field(default="/redoc")
    openapi_url: str | None = Field(default="/openapi.json")
    debug: bool = Field(default=False)

    # Discovery filtering
    exclude_groups: frozenset[str] = Field(default=frozenset())
    exclude_entry_points: frozenset[str] = Field(default=frozenset())
