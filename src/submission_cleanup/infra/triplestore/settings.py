"""Triplestore connection settings.

Loaded from environment variables with the ``SPARQL_`` prefix.

Environment Variables:
    SPARQL_ENDPOINT: SPARQL 1.1 protocol endpoint (query and update)
    SPARQL_TIMEOUT: Per-request timeout in seconds
    SPARQL_SUDO: Send the ``mu-auth-sudo`` header to bypass authorization rules
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TriplestoreSettings(BaseSettings):
    """SPARQL endpoint configuration loaded from environment variables.

    Example:
        >>> settings = TriplestoreSettings()
        >>> settings.endpoint
        'http://database:8890/sparql'
    """

    model_config = SettingsConfigDict(
        env_prefix="SPARQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    endpoint: str = Field(
        default="http://database:8890/sparql",
        description="SPARQL endpoint URL",
    )
    timeout: float = Field(
        default=30.0,
        ge=0.1,
        description="Per-request timeout in seconds",
    )
    sudo: bool = Field(
        default=True,
        description="Send mu-auth-sudo header (bypasses mu-authorization rules)",
    )

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Require an HTTP(S) endpoint URL."""
        if not v.startswith(("http://", "https://")):
            msg = "SPARQL_ENDPOINT must be a valid HTTP(S) URL"
            raise ValueError(msg)
        return v


@lru_cache(maxsize=1)
def get_triplestore_settings() -> TriplestoreSettings:
    """Get singleton TriplestoreSettings instance.

    Clear cache with ``get_triplestore_settings.cache_clear()`` for testing.
    """
    return TriplestoreSettings()
