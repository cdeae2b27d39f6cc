"""Clean-up service application.

Routers, middleware, error handlers and lifespan hooks are all declared as
``submission_cleanup.*`` entry points and auto-discovered by
:func:`~submission_cleanup.infra.fastapi.create_app`.

Usage::

    from submission_cleanup.app import create_cleanup_app

    app = create_cleanup_app()
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from submission_cleanup.infra.fastapi import AppSettings, create_app

if TYPE_CHECKING:
    from fastapi import FastAPI


def create_cleanup_app(
    settings: AppSettings | None = None,
    *,
    exclude_names: frozenset[str] | None = None,
) -> FastAPI:
    """Create the clean-up service app.

    Args:
        settings: Application settings. If ``None``, loaded from environment.
        exclude_names: Entry-point names to suppress (e.g. ``"submissions"``
            to run without a triplestore).
    """
    return create_app(settings=settings, exclude_names=exclude_names)


def run_server() -> None:
    """Serve the app with uvicorn (``submission-cleanup`` console script).

    Binds to ``HOST``/``PORT`` (default ``0.0.0.0:80``, the mu-semtech convention).
    """
    import uvicorn

    uvicorn.run(
        create_cleanup_app(),
        host=os.getenv("HOST", "0.0.0.0"),  # noqa: S104
        port=int(os.getenv("PORT", "80")),
        log_config=None,
    )
