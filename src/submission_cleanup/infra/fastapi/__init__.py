"""Submission Clean-up Infra FastAPI — error handlers, middleware, app factory."""

from submission_cleanup.infra.fastapi.app_factory import create_app
from submission_cleanup.infra.fastapi.error_handlers import (
    ProblemDetail,
    register_exception_handlers,
)
from submission_cleanup.infra.fastapi.middleware.request_id import (
    RequestIdMiddleware,
    get_request_id,
)
from submission_cleanup.infra.fastapi.settings import AppSettings

__all__ = [
    "AppSettings",
    "ProblemDetail",
    "RequestIdMiddleware",
    "create_app",
    "get_request_id",
    "register_exception_handlers",
]
