"""Lifespan composition for the app factory."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable
    from contextlib import AbstractAsyncContextManager

    from fastapi import FastAPI
    from submission_cleanup.foundation.application import LifespanContribution

logger = logging.getLogger(__name__)


def _hook_name(contribution: LifespanContribution) -> str:
    return getattr(contribution.hook, "__qualname__", repr(contribution.hook))


def compose_lifespan(
    hooks: list[LifespanContribution],
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Fold lifespan hooks into the single ``lifespan`` FastAPI accepts.

    Hooks are entered by ascending priority on an :class:`AsyncExitStack`,
    so they stop in reverse order. If a hook fails to start, the hooks
    already running are stopped and the error propagates.
    """
    ordered = sorted(hooks, key=lambda h: h.priority)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            for contribution in ordered:
                await stack.enter_async_context(contribution.hook(app))
                logger.info(
                    "lifespan_hook_started",
                    extra={"hook": _hook_name(contribution), "priority": contribution.priority},
                )
            yield
            logger.info("lifespan_shutdown", extra={"hooks": len(ordered)})

    return lifespan
