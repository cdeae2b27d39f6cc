"""Async SPARQL 1.1 protocol client.

Wraps ``httpx.AsyncClient`` to provide:
- Form-encoded query and update POSTs against one endpoint
- ``mu-auth-sudo`` header for privileged access in mu-semtech stacks
- Translation of transport and HTTP errors into :mod:`.errors` types

Lifecycle: Created once during app lifespan startup, stored in app.state,
closed on shutdown.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from submission_cleanup.infra.triplestore.errors import (
    TriplestoreQueryError,
    TriplestoreUnavailableError,
)
from submission_cleanup.infra.triplestore.settings import TriplestoreSettings

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

SPARQL_RESULTS_JSON = "application/sparql-results+json"
SUDO_HEADER = "mu-auth-sudo"


class SparqlClient:
    """HTTP client for a single SPARQL endpoint.

    Args:
        settings: Endpoint configuration. Loaded from environment if ``None``.
        transport: Optional httpx transport (e.g. ``httpx.MockTransport`` in tests).

    Example:
        >>> async with SparqlClient() as client:
        ...     results = await client.query("ASK { ?s ?p ?o }")
    """

    def __init__(
        self,
        settings: TriplestoreSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or TriplestoreSettings()
        headers = {"Accept": SPARQL_RESULTS_JSON}
        if self._settings.sudo:
            headers[SUDO_HEADER] = "true"
        self._http = httpx.AsyncClient(
            timeout=self._settings.timeout,
            headers=headers,
            transport=transport,
        )

    @property
    def endpoint(self) -> str:
        """The configured SPARQL endpoint URL."""
        return self._settings.endpoint

    async def query(self, query: str) -> dict[str, Any]:
        """Run a SPARQL query and return the parsed JSON results document."""
        response = await self._post({"query": query})
        try:
            return response.json()  # type: ignore[no-any-return]
        except ValueError as err:
            raise TriplestoreQueryError(
                f"SPARQL endpoint returned a non-JSON response ({response.status_code})"
            ) from err

    async def update(self, update: str) -> None:
        """Run a SPARQL update."""
        await self._post({"update": update})

    async def _post(self, data: dict[str, str]) -> httpx.Response:
        kind = next(iter(data))
        try:
            response = await self._http.post(self._settings.endpoint, data=data)
        except httpx.HTTPError as err:
            logger.warning(
                "sparql_request_failed",
                extra={"endpoint": self._settings.endpoint, "kind": kind, "error": str(err)},
            )
            raise TriplestoreUnavailableError(
                f"SPARQL endpoint unreachable: {type(err).__name__}: {err}"
            ) from err

        if response.status_code >= 500:
            logger.warning(
                "sparql_server_error",
                extra={"status": response.status_code, "kind": kind},
            )
            raise TriplestoreUnavailableError(
                f"SPARQL endpoint returned {response.status_code}: {response.text[:500]}"
            )
        if response.status_code >= 400:
            logger.error(
                "sparql_rejected",
                extra={"status": response.status_code, "kind": kind, "sparql": data[kind]},
            )
            raise TriplestoreQueryError(
                f"SPARQL endpoint rejected {kind} with {response.status_code}: "
                f"{response.text[:500]}"
            )
        return response

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    async def __aenter__(self) -> SparqlClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()