"""``/healthz``: can the service reach the stores a deletion needs?

The triplestore is always checked. Redis is checked only when the Redis
lock backend put a factory on ``app.state``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)

_OK = {"status": "ok"}


async def _check_triplestore(state: Any) -> None:
    store = getattr(state, "graph_store", None)
    if store is None:
        raise RuntimeError("graph store not configured")
    await store.ping()


async def _check_redis(state: Any) -> None:
    client = await state.redis_factory.get_client()
    await client.ping()


async def _run(name: str, check: Callable[[Any], Awaitable[None]], state: Any) -> dict[str, str]:
    try:
        await check(state)
    except Exception as exc:
        logger.warning("health_check_failed", extra={"subsystem": name, "error": str(exc)})
        return {"status": "error", "detail": str(exc)}
    return _OK


@router.get("/healthz")
async def healthz(request: Request) -> JSONResponse:
    """200 with ``status: ok`` when every check passes, otherwise 503 ``degraded``."""
    state = request.app.state
    checks: dict[str, Callable[[Any], Awaitable[None]]] = {"triplestore": _check_triplestore}
    if getattr(state, "redis_factory", None) is not None:
        checks["redis"] = _check_redis

    results = {name: await _run(name, check, state) for name, check in checks.items()}
    healthy = all(result is _OK for result in results.values())
    return JSONResponse(
        content={"status": "ok" if healthy else "degraded", "checks": results},
        status_code=200 if healthy else 503,
    )
