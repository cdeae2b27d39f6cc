"""RFC 7807 Problem Details exception handlers for FastAPI.

Domain errors become ``application/problem+json`` responses. Client errors
(4xx) are looked up in a table keyed by exception class. Server errors
(500) are logged with the request ID, and an error alert is stored through
``app.state.error_alerts`` before answering; the alert URI is returned as
``error_uri`` so operators can find the record.

Usage:
    from submission_cleanup.infra.fastapi.error_handlers import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID

from pydantic import BaseModel, Field

from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from submission_cleanup.foundation.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    StoreFailureError,
    ValidationError,
)
from submission_cleanup.infra.fastapi.middleware.request_id import get_request_id

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"

UNEXPECTED_FAILURE_MESSAGE = (
    "Something went wrong while deleting the submission and its related resources"
)


class ProblemDetail(BaseModel):
    """RFC 7807 body plus the service's extension members.

    ``error_code``, ``context``, ``correlation_id`` and ``error_uri`` are
    extensions; the last two only appear on 500 responses.
    """

    type: str = Field(..., examples=["/errors/conflict"])
    title: str
    status: int = Field(..., ge=400, le=599)
    detail: str
    instance: str | None = None
    error_code: str | None = Field(default=None, examples=["CONFLICT", "STORE_FAILURE"])
    context: dict[str, Any] | None = None
    correlation_id: str | None = None
    error_uri: str | None = Field(default=None, description="URI of the stored error alert")


@dataclass(frozen=True, slots=True)
class _ProblemType:
    slug: str
    title: str
    status: int


# Most specific first; DomainError is the fallback
_CLIENT_PROBLEMS: tuple[tuple[type[DomainError], _ProblemType], ...] = (
    (AuthorizationError, _ProblemType("forbidden", "Forbidden", 403)),
    (NotFoundError, _ProblemType("not-found", "Resource Not Found", 404)),
    (ConflictError, _ProblemType("conflict", "Conflict", 409)),
    (ValidationError, _ProblemType("validation-error", "Validation Error", 422)),
    (DomainError, _ProblemType("domain-error", "Bad Request", 400)),
)

_SENSITIVE_KEYS = frozenset({"key", "vendor_key", "password", "secret", "token", "credential"})

_SENSITIVE_PATTERNS = (
    (re.compile(r"redis://[^@\s]*@"), "redis://[REDACTED]@"),
    (re.compile(r"password\s*=\s*['\"]?[^'\"\s]+['\"]?", re.IGNORECASE), "password=[REDACTED]"),
    (re.compile(r"key\s*=\s*['\"]?[^'\"\s]+['\"]?", re.IGNORECASE), "key=[REDACTED]"),
)


def _sanitize_context(context: dict[str, Any] | None) -> dict[str, Any] | None:
    """JSON-safe copy of ``context`` without credential entries; ``None`` if empty."""
    if not context:
        return None
    sanitized = {
        key: _sanitize_value(value)
        for key, value in context.items()
        if key.lower() not in _SENSITIVE_KEYS
    }
    return sanitized or None


def _sanitize_value(value: Any) -> Any:
    if isinstance(value, str):
        for pattern, replacement in _SENSITIVE_PATTERNS:
            value = pattern.sub(replacement, value)
        return value
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return _sanitize_context(value)
    if isinstance(value, (list, tuple)):
        return [_sanitize_value(item) for item in value]
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


def _respond(problem: ProblemDetail) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(exclude_none=True),
        media_type=PROBLEM_MEDIA_TYPE,
    )


def _problem_type_for(exc: DomainError) -> _ProblemType:
    return next(problem for cls, problem in _CLIENT_PROBLEMS if isinstance(exc, cls))


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Answer a client-side domain error with its 4xx problem type.

    A refused deletion (409) also carries the reason next to the submission
    URI, so callers can tell which submission was already sent.
    """
    problem_type = _problem_type_for(exc)
    context = exc.context
    if isinstance(exc, ConflictError):
        context = {**context, "reason": exc.reason}
    return _respond(
        ProblemDetail(
            type=f"/errors/{problem_type.slug}",
            title=problem_type.title,
            status=problem_type.status,
            detail=str(exc),
            instance=request.url.path,
            error_code=exc.error_code,
            context=_sanitize_context(context),
        )
    )


async def _server_error(
    request: Request,
    *,
    slug: str,
    title: str,
    error_code: str,
    detail: str,
    alert_message: str,
    alert_detail: str,
    reference: str | None = None,
    context: dict[str, Any] | None = None,
) -> JSONResponse:
    error_uri = None
    reporter = getattr(request.app.state, "error_alerts", None)
    if reporter is not None:
        error_uri = await reporter.send(alert_message, detail=alert_detail, reference=reference)
    return _respond(
        ProblemDetail(
            type=f"/errors/{slug}",
            title=title,
            status=500,
            detail=detail,
            instance=request.url.path,
            error_code=error_code,
            context=_sanitize_context(context),
            correlation_id=get_request_id() or "unknown",
            error_uri=error_uri,
        )
    )


async def store_failure_handler(request: Request, exc: StoreFailureError) -> JSONResponse:
    """Answer a failed deletion (including a partial one) with 500.

    ``context.phase`` and ``context.entity`` tell operators where the
    deletion stopped; nothing is rolled back.
    """
    logger.error(
        "store_failure",
        extra={
            "path": request.url.path,
            "error_code": exc.error_code,
            "phase": exc.phase,
            "entity": exc.entity,
        },
    )
    return await _server_error(
        request,
        slug="store-failure",
        title="Store Failure",
        error_code=exc.error_code,
        detail=str(exc),
        alert_message=exc.message,
        alert_detail=str(exc),
        reference=exc.context.get("submission_uri"),
        context=exc.context,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all 500. The exception text goes to the log and the alert only."""
    logger.exception(
        "unhandled_exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
    )
    return await _server_error(
        request,
        slug="internal-error",
        title="Internal Server Error",
        error_code="INTERNAL_ERROR",
        detail=UNEXPECTED_FAILURE_MESSAGE,
        alert_message=UNEXPECTED_FAILURE_MESSAGE,
        alert_detail=f"{type(exc).__name__}: {exc}",
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """FastAPI's own parameter validation failures as 422."""
    errors = [
        {
            "loc": list(error.get("loc", [])),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    return _respond(
        ProblemDetail(
            type="/errors/request-validation-error",
            title="Request Validation Error",
            status=422,
            detail="Request validation failed",
            instance=request.url.path,
            error_code="REQUEST_VALIDATION_ERROR",
            context={"errors": errors},
        )
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the problem-details handlers on ``app``.

    Starlette picks the handler of the nearest class in the exception's MRO,
    so StoreFailureError wins over DomainError and Exception catches the rest.
    """
    # Starlette's handler typing is stricter than the handlers' exception types
    app.add_exception_handler(DomainError, domain_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StoreFailureError, store_failure_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError,
        request_validation_handler,  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)
