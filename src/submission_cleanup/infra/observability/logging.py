"""structlog setup shared by the service's two kinds of logger.

The deletion service logs through ``get_logger(__name__)`` with keyword
context; the store adapters and FastAPI handlers use stdlib
``logging.getLogger(__name__)`` with ``extra=``. :func:`configure_logging`
sends both through the same processors: request id from the contextvars,
level, UTC timestamp, credential redaction, then JSON (production) or
console rendering.

Usage:
    from submission_cleanup.infra.observability import get_logger

    logger = get_logger(__name__)
    logger.info("submission_deleted", submission_uri="http://...")
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Literal

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from collections.abc import MutableMapping

# The delete-request envelope calls the vendor secret plain ``key``
SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "key",
        "vendor_key",
        "password",
        "token",
        "authorization",
        "api_key",
        "secret",
        "credential",
        "credentials",
    }
)
_SENSITIVE_FRAGMENTS = ("password", "token", "secret")

REDACTED_VALUE: str = "***REDACTED***"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """``LOG_LEVEL`` and ``ENVIRONMENT`` (``production`` switches to JSON lines)."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    log_level: LogLevel = Field(default="INFO", alias="LOG_LEVEL")
    environment: str = Field(default="development", alias="ENVIRONMENT")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        if not isinstance(v, str) or v.upper() not in logging.getLevelNamesMapping():
            msg = "log_level must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL"
            raise ValueError(msg)
        return v.upper()

    @property
    def use_json_logs(self) -> bool:
        return self.environment == "production"

    @property
    def log_level_int(self) -> int:
        return logging.getLevelNamesMapping()[self.log_level]


class SensitiveDataProcessor:
    """Replace credential values in the event dict with ``REDACTED_VALUE``.

    Example:
        >>> SensitiveDataProcessor()(None, "info", {"event": "verify", "key": "s3cr3t"})["key"]
        '***REDACTED***'
    """

    def __call__(
        self,
        logger: Any,
        method_name: str,
        event_dict: MutableMapping[str, Any],
    ) -> MutableMapping[str, Any]:
        for name in [n for n in event_dict if self._is_sensitive(n)]:
            event_dict[name] = REDACTED_VALUE
        return event_dict

    @staticmethod
    def _is_sensitive(name: str) -> bool:
        lowered = name.lower()
        return lowered in SENSITIVE_FIELDS or any(f in lowered for f in _SENSITIVE_FRAGMENTS)


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Cached settings; tests call ``get_logging_settings.cache_clear()``."""
    return LoggingSettings()


def _pre_render_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        SensitiveDataProcessor(),
    ]


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Install the structlog pipeline and a single root handler.

    Runs in the observability lifespan hook; calling it again replaces the
    previous configuration.
    """
    settings = settings or get_logging_settings()
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if settings.use_json_logs
        else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=[*_pre_render_chain(), structlog.processors.format_exc_info, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(settings.log_level_int),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # stdlib records (adapters, uvicorn) get the same chain plus their extra= fields
    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                structlog.stdlib.add_logger_name,
                structlog.stdlib.ExtraAdder(),
                *_pre_render_chain(),
            ],
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(settings.log_level_int)


def get_logger(name: str | None = None) -> Any:
    """structlog logger, bound to ``logger=name`` when a name is given."""
    logger = structlog.get_logger()
    return logger.bind(logger=name) if name is not None else logger
