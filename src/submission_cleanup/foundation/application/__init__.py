"""Submission Clean-up Foundation Application — wiring contracts."""

from submission_cleanup.foundation.application.contributions import (
    LIFESPAN_PRIORITY_OBSERVABILITY,
    LIFESPAN_PRIORITY_SERVICES,
    EntryPointGroup,
    LifespanContribution,
    MiddlewareContribution,
)
from submission_cleanup.foundation.application.discovery import Discovered, discover

__all__ = [
    "LIFESPAN_PRIORITY_OBSERVABILITY",
    "LIFESPAN_PRIORITY_SERVICES",
    "Discovered",
    "EntryPointGroup",
    "LifespanContribution",
    "MiddlewareContribution",
    "discover",
]
