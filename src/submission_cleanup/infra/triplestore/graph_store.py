"""SPARQL-backed implementation of :class:`GraphStorePort`."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from submission_cleanup.infra.triplestore.sparql import (
    parse_bindings,
    render_delete_resources,
    render_select,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from submission_cleanup.foundation.domain.graph_patterns import Binding, GraphPattern
    from submission_cleanup.infra.triplestore.client import SparqlClient

logger = logging.getLogger(__name__)


class SparqlGraphStore:
    """Graph store adapter rendering patterns to SPARQL over a :class:`SparqlClient`.

    Attributes:
        _client: Shared SPARQL client (owned by the triplestore lifespan).
    """

    def __init__(self, client: SparqlClient) -> None:
        self._client = client

    async def match(
        self,
        pattern: GraphPattern,
        *,
        partition: str | None,
        limit: int | None = None,
    ) -> list[Binding]:
        query = render_select(pattern, graph=partition, limit=limit)
        results = await self._client.query(query)
        bindings = parse_bindings(results)
        logger.debug(
            "graph_store_match",
            extra={"partition": partition, "solutions": len(bindings)},
        )
        return bindings

    async def delete_resources(self, uris: Sequence[str], *, partition: str) -> None:
        if not uris:
            return
        await self._client.update(render_delete_resources(uris, graph=partition))
        logger.info(
            "graph_store_resources_deleted",
            extra={"partition": partition, "resources": list(uris)},
        )

    async def ping(self) -> None:
        await self._client.query("ASK { ?s ?p ?o }")
