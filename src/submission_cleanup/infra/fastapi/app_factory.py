"""FastAPI application factory.

:func:`create_app` builds the app from the four ``submission_cleanup.*``
entry point groups (see :class:`EntryPointGroup`) plus any contributions
handed in directly, which is how tests wire an app without installed
entry points.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fastapi import FastAPI
from submission_cleanup.foundation.application import (
    EntryPointGroup,
    LifespanContribution,
    MiddlewareContribution,
    discover,
)
from submission_cleanup.infra.fastapi.lifespan import compose_lifespan
from submission_cleanup.infra.fastapi.settings import AppSettings

if TYPE_CHECKING:
    from collections.abc import Callable

    from fastapi import APIRouter
    from submission_cleanup.foundation.application import Discovered

    ErrorHandlerRegistrar = Callable[[FastAPI], None]

logger = logging.getLogger(__name__)

ALL_GROUPS: frozenset[str] = frozenset(EntryPointGroup)


@dataclass(frozen=True)
class _Plugins:
    """Entry point lookups filtered by the app settings."""

    exclude_groups: frozenset[str]
    exclude_names: frozenset[str]

    def load(self, group: EntryPointGroup) -> list[Discovered]:
        if group in self.exclude_groups:
            return []
        return discover(group, exclude_names=self.exclude_names)


def _lifespan_hooks(
    plugins: _Plugins, extra: list[LifespanContribution]
) -> list[LifespanContribution]:
    hooks = list(extra)
    for _, value in plugins.load(EntryPointGroup.LIFESPAN):
        if not isinstance(value, LifespanContribution):
            # bare context manager factory
            value = LifespanContribution(value)
        hooks.append(value)
    return hooks


def _install_middleware(
    app: FastAPI, plugins: _Plugins, extra: list[MiddlewareContribution]
) -> None:
    stack = list(extra)
    for name, value in plugins.load(EntryPointGroup.MIDDLEWARE):
        if not isinstance(value, MiddlewareContribution):
            logger.warning("middleware_entry_point_invalid", extra={"entry_point": name})
            continue
        stack.append(value)

    # add_middleware wraps the app, so the outermost entry goes in last
    for contribution in sorted(stack, key=lambda c: c.priority, reverse=True):
        app.add_middleware(contribution.middleware_class, **contribution.options)
        logger.info(
            "middleware_registered",
            extra={
                "middleware": contribution.middleware_class.__name__,
                "priority": contribution.priority,
            },
        )


def _install_error_handlers(
    app: FastAPI, plugins: _Plugins, extra: list[ErrorHandlerRegistrar]
) -> None:
    registrars = list(extra)
    for name, value in plugins.load(EntryPointGroup.ERROR_HANDLERS):
        if not callable(value):
            logger.warning("error_handler_entry_point_invalid", extra={"entry_point": name})
            continue
        registrars.append(value)
    for register in registrars:
        register(app)


def _include_routers(app: FastAPI, plugins: _Plugins, extra: list[APIRouter]) -> None:
    routers = [*extra, *(value for _, value in plugins.load(EntryPointGroup.ROUTERS))]
    for router in routers:
        app.include_router(router)
        logger.info("router_included", extra={"routes": len(router.routes)})


def create_app(
    settings: AppSettings | None = None,
    *,
    extra_routers: list[APIRouter] | None = None,
    extra_middleware: list[MiddlewareContribution] | None = None,
    extra_lifespan_hooks: list[LifespanContribution] | None = None,
    extra_error_handlers: list[ErrorHandlerRegistrar] | None = None,
    exclude_groups: frozenset[str] | None = None,
    exclude_names: frozenset[str] | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Application settings. If ``None``, loaded from environment.
        extra_routers: Routers included ahead of discovered ones.
        extra_middleware: Middleware merged with discovered ones by priority.
        extra_lifespan_hooks: Lifespan hooks merged with discovered ones.
        extra_error_handlers: ``register(app)`` callables run before
            discovered ones.
        exclude_groups: Entry point groups to skip; overrides the settings.
        exclude_names: Entry point names to skip in every group; overrides
            the settings.
    """
    settings = settings or AppSettings()
    plugins = _Plugins(
        exclude_groups=settings.exclude_groups if exclude_groups is None else exclude_groups,
        exclude_names=settings.exclude_entry_points if exclude_names is None else exclude_names,
    )

    app = FastAPI(
        title=settings.title,
        version=settings.version,
        description=settings.description,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        debug=settings.debug,
        lifespan=compose_lifespan(_lifespan_hooks(plugins, extra_lifespan_hooks or [])),
    )
    _install_middleware(app, plugins, extra_middleware or [])
    _install_error_handlers(app, plugins, extra_error_handlers or [])
    _include_routers(app, plugins, extra_routers or [])
    return app
