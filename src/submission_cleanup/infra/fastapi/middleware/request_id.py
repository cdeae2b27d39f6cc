"""Request ID middleware for correlating log lines and error alerts.

Every deletion request gets an ``X-Request-ID``. A caller-supplied UUID is
kept, anything else is replaced. The id is bound to the structlog context
for the duration of the request, exposed through :func:`get_request_id`
for the problem responses, and echoed on the response.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar
from typing import TYPE_CHECKING

import structlog
from starlette.datastructures import Headers, MutableHeaders

from submission_cleanup.foundation.application import MiddlewareContribution

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

REQUEST_ID_HEADER = "X-Request-ID"

request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Current request ID, or empty string outside of a request."""
    return request_id_ctx.get()


def _is_valid_uuid(value: str | None) -> bool:
    if not value:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class RequestIdMiddleware:
    """Pure ASGI middleware binding a request ID to each HTTP request.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(RequestIdMiddleware)
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = Headers(scope=scope).get(REQUEST_ID_HEADER, "")
        if not _is_valid_uuid(request_id):
            request_id = str(uuid.uuid4())

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                MutableHeaders(scope=message)[REQUEST_ID_HEADER] = request_id
            await send(message)

        token = request_id_ctx.set(request_id)
        with structlog.contextvars.bound_contextvars(request_id=request_id):
            try:
                await self.app(scope, receive, send_with_request_id)
            finally:
                request_id_ctx.reset(token)


# Outermost, so error responses carry the id too
contribution = MiddlewareContribution(middleware_class=RequestIdMiddleware, priority=10)
