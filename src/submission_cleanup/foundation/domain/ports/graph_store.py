"""Port interface for the statement (graph) store.

All reads are basic-graph-pattern matches and all writes remove every
statement whose subject is one of the given resources. Both are scoped to a
single partition (named graph); ``partition=None`` means unscoped and is
reserved for the lookups that run before the partition is known.

Example:
    >>> async def count_parts(store: GraphStorePort, partition: str, uri: str) -> int:
    ...     rows = await store.match(
    ...         GraphPattern((TriplePattern(uri, DCT_HAS_PART, Variable("part")),)),
    ...         partition=partition,
    ...     )
    ...     return len(rows)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from submission_cleanup.foundation.domain.graph_patterns import Binding, GraphPattern


@runtime_checkable
class GraphStorePort(Protocol):
    """Port for pattern-match reads and delete-statement writes.

    Implementations must make ``delete_resources`` idempotent: deleting
    statements that no longer exist is a no-op.
    """

    async def match(
        self,
        pattern: GraphPattern,
        *,
        partition: str | None,
        limit: int | None = None,
    ) -> list[Binding]:
        """Return the distinct solutions of ``pattern``.

        Args:
            pattern: Basic graph pattern to evaluate.
            partition: Named graph to scope the match to, or ``None`` for all graphs.
            limit: Maximum number of solutions.

        Returns:
            One binding dict per solution; optional variables are absent
            from a solution when their group did not match.
        """
        ...

    async def delete_resources(self, uris: Sequence[str], *, partition: str) -> None:
        """Delete every statement in ``partition`` whose subject is in ``uris``.

        Args:
            uris: Resource URIs to remove; removed together in one operation.
            partition: Named graph holding the statements.
        """
        ...

    async def ping(self) -> None:
        """Check connectivity, raising on failure."""
        ...
