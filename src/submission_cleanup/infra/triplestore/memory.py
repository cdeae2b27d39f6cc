"""In-memory implementation of :class:`GraphStorePort`.

Holds quads in a set and evaluates :class:`GraphPattern` with a nested-loop
join. Intended for tests and local runs without a triplestore. Mutating
calls are appended to an optional shared ``journal`` so call order across
stores can be asserted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from submission_cleanup.foundation.domain.graph_patterns import Literal, Variable

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from submission_cleanup.foundation.domain.graph_patterns import (
        Binding,
        GraphPattern,
        Term,
        TriplePattern,
    )

Quad = tuple[str, str, str, "str | Literal"]
_Solution = dict[str, "str | Literal"]


class InMemoryGraphStore:
    """Quad store with basic-graph-pattern evaluation.

    Example:
        >>> store = InMemoryGraphStore()
        >>> store.add("http://g", "http://s", "http://p", Literal("x"))
        >>> len(store.snapshot())
        1
    """

    def __init__(
        self,
        quads: Iterable[Quad] = (),
        *,
        journal: list[tuple[Any, ...]] | None = None,
    ) -> None:
        self._quads: set[Quad] = set(quads)
        self.journal: list[tuple[Any, ...]] = journal if journal is not None else []

    def add(self, graph: str, subject: str, predicate: str, obj: str | Literal) -> None:
        """Insert one statement into ``graph``."""
        self._quads.add((graph, subject, predicate, obj))

    def snapshot(self) -> frozenset[Quad]:
        """Immutable copy of all stored quads."""
        return frozenset(self._quads)

    def subjects(self, graph: str | None = None) -> set[str]:
        """Distinct subjects, optionally restricted to one graph."""
        return {q[1] for q in self._quads if graph is None or q[0] == graph}

    async def match(
        self,
        pattern: GraphPattern,
        *,
        partition: str | None,
        limit: int | None = None,
    ) -> list[Binding]:
        quads = [q for q in self._quads if partition is None or q[0] == partition]
        solutions = self._join([{}], pattern.required, quads)

        for group in pattern.optional:
            extended: list[_Solution] = []
            for solution in solutions:
                matches = self._join([solution], group, quads)
                extended.extend(matches or [solution])
            solutions = extended

        distinct: dict[tuple[tuple[str, str], ...], Binding] = {}
        for solution in solutions:
            binding = {
                name: value.value if isinstance(value, Literal) else value
                for name, value in solution.items()
            }
            distinct.setdefault(tuple(sorted(binding.items())), binding)
        results = [distinct[key] for key in sorted(distinct)]
        return results[:limit] if limit is not None else results

    async def delete_resources(self, uris: Sequence[str], *, partition: str) -> None:
        if not uris:
            return
        targets = set(uris)
        self._quads = {q for q in self._quads if not (q[0] == partition and q[1] in targets)}
        self.journal.append(("graph.delete", partition, tuple(uris)))

    async def ping(self) -> None:
        return None

    # -- Evaluation ----------------------------------------------------------

    def _join(
        self,
        solutions: list[_Solution],
        patterns: Sequence[TriplePattern],
        quads: list[Quad],
    ) -> list[_Solution]:
        for pattern in patterns:
            next_solutions: list[_Solution] = []
            for solution in solutions:
                for _, s, p, o in quads:
                    if p != pattern.predicate:
                        continue
                    bound = _unify(pattern.subject, s, solution)
                    if bound is None:
                        continue
                    bound = _unify(pattern.object, o, bound)
                    if bound is not None:
                        next_solutions.append(bound)
            solutions = next_solutions
            if not solutions:
                break
        return solutions


def _unify(term: Term, value: str | Literal, solution: _Solution) -> _Solution | None:
    """Match ``term`` against a stored value, extending ``solution`` if needed."""
    if isinstance(term, Variable):
        current = solution.get(term.name)
        if current is None:
            return {**solution, term.name: value}
        return solution if current == value else None
    return solution if term == value else None
