"""SPARQL text rendering and escaping.

Turns :class:`GraphPattern` value objects into ``SELECT`` queries and
resource lists into ``DELETE`` updates. Every IRI and literal that reaches
query text passes through :func:`escape_uri` or :func:`escape_string`.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from submission_cleanup.foundation.domain.graph_patterns import Literal, Variable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from submission_cleanup.foundation.domain.graph_patterns import (
        Binding,
        GraphPattern,
        Term,
        TriplePattern,
    )

# Characters not allowed inside an IRIREF (SPARQL 1.1 grammar, production 139)
_INVALID_IRI_CHARS = re.compile(r'[\x00-\x20<>"{}|^`\\]')

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_INDENT = "  "


def is_valid_iri(uri: str) -> bool:
    """Whether ``uri`` can be written as a SPARQL IRI reference."""
    return bool(uri) and not _INVALID_IRI_CHARS.search(uri)


def escape_uri(uri: str) -> str:
    """Render an IRI as ``<uri>``.

    Raises:
        ValueError: If the IRI is empty or contains characters that would
            break out of the IRI reference.
    """
    if not is_valid_iri(uri):
        msg = f"Invalid IRI for SPARQL: {uri!r}"
        raise ValueError(msg)
    return f"<{uri}>"


def escape_string(value: str) -> str:
    """Render a plain string literal with all special characters escaped."""
    escaped = "".join(_STRING_ESCAPES.get(ch, ch) for ch in value)
    return f'"{escaped}"'


def escape_datetime(value: datetime) -> str:
    """Render an ``xsd:dateTime`` typed literal."""
    return f'"{value.isoformat()}"^^<http://www.w3.org/2001/XMLSchema#dateTime>'


def render_term(term: Term) -> str:
    """Render a single pattern term."""
    if isinstance(term, Variable):
        return f"?{term.name}"
    if isinstance(term, Literal):
        return escape_string(term.value)
    return escape_uri(term)


def _render_triple(pattern: TriplePattern) -> str:
    return (
        f"{render_term(pattern.subject)} {escape_uri(pattern.predicate)} "
        f"{render_term(pattern.object)} ."
    )


def _render_body(pattern: GraphPattern, depth: int) -> list[str]:
    pad = _INDENT * depth
    lines = [f"{pad}{_render_triple(p)}" for p in pattern.required]
    for group in pattern.optional:
        lines.append(f"{pad}OPTIONAL {{")
        lines.extend(f"{pad}{_INDENT}{_render_triple(p)}" for p in group)
        lines.append(f"{pad}}}")
    return lines


def render_select(
    pattern: GraphPattern,
    *,
    graph: str | None,
    limit: int | None = None,
) -> str:
    """Render a ``SELECT DISTINCT`` query for ``pattern``.

    Args:
        pattern: The basic graph pattern.
        graph: Named graph to scope to; ``None`` queries the default
            (union) graph.
        limit: Optional solution limit.

    Raises:
        ValueError: If the pattern binds no variables.
    """
    variables = pattern.variables()
    if not variables:
        msg = "render_select requires a pattern with at least one variable"
        raise ValueError(msg)
    projection = " ".join(f"?{v.name}" for v in variables)
    if graph is None:
        body = _render_body(pattern, depth=1)
    else:
        body = [
            f"{_INDENT}GRAPH {escape_uri(graph)} {{",
            *_render_body(pattern, depth=2),
            f"{_INDENT}}}",
        ]
    lines = [f"SELECT DISTINCT {projection} WHERE {{", *body, "}"]
    if limit is not None:
        lines.append(f"LIMIT {int(limit)}")
    return "\n".join(lines)


def render_delete_resources(uris: Sequence[str], *, graph: str) -> str:
    """Render a ``DELETE`` removing all statements of ``uris`` in ``graph``."""
    if not uris:
        msg = "render_delete_resources requires at least one URI"
        raise ValueError(msg)
    values = " ".join(escape_uri(u) for u in uris)
    g = escape_uri(graph)
    return "\n".join(
        [
            f"DELETE {{ GRAPH {g} {{ ?s ?p ?o . }} }}",
            "WHERE {",
            f"{_INDENT}GRAPH {g} {{",
            f"{_INDENT * 2}VALUES ?s {{ {values} }}",
            f"{_INDENT * 2}?s ?p ?o .",
            f"{_INDENT}}}",
            "}",
        ]
    )


def parse_bindings(results: dict[str, Any]) -> list[Binding]:
    """Flatten a SPARQL JSON results document into binding dicts.

    Unbound optional variables are absent from the returned dicts.
    """
    rows = results.get("results", {}).get("bindings", [])
    return [{name: cell["value"] for name, cell in row.items()} for row in rows]
