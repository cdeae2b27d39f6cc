"""What an installed module can plug into the clean-up service.

Each ``submission_cleanup.*`` entry point group carries one kind of
contribution. The records are plain dataclasses so the foundation layer
stays free of FastAPI imports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class EntryPointGroup(StrEnum):
    """Entry point groups scanned by the app factory."""

    ROUTERS = "submission_cleanup.routers"
    MIDDLEWARE = "submission_cleanup.middleware"
    ERROR_HANDLERS = "submission_cleanup.error_handlers"
    LIFESPAN = "submission_cleanup.lifespan"


# Lifespan hooks start in ascending order: logging before the stores it reports on
LIFESPAN_PRIORITY_OBSERVABILITY = 50
LIFESPAN_PRIORITY_SERVICES = 75

_MIDDLEWARE_PRIORITIES = range(500)


@dataclass(frozen=True, slots=True)
class MiddlewareContribution:
    """An ASGI middleware and its position in the stack.

    Attributes:
        middleware_class: Middleware class handed to ``app.add_middleware``.
        priority: 0 is outermost. Request correlation sits below 100.
        options: Keyword arguments for the middleware constructor.
    """

    middleware_class: type[Any]
    priority: int = 400
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.priority not in _MIDDLEWARE_PRIORITIES:
            msg = f"Middleware priority must be between 0 and 499, got {self.priority}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class LifespanContribution:
    """A startup/shutdown hook.

    ``hook(app)`` must return an async context manager. Lower priorities
    start first and stop last.
    """

    hook: Any
    priority: int = 500
