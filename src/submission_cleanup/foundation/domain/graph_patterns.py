"""Value objects for statement-store pattern matching.

A ``GraphPattern`` is a basic graph pattern (required triple patterns plus
independent optional groups) that every graph-store adapter can evaluate.
Keeping queries structured lets the SPARQL adapter render them and the
in-memory adapter evaluate them without parsing query text.

Terms:
    - ``str``: an IRI.
    - ``Literal``: a plain string literal.
    - ``Variable``: a named variable bound by the match.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Variable:
    """A named query variable (rendered as ``?name``)."""

    name: str

    def __post_init__(self) -> None:
        if not self.name or not self.name.replace("_", "").isalnum():
            msg = f"Invalid variable name: {self.name!r}"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class Literal:
    """A plain string literal."""

    value: str


Term = str | Literal | Variable


@dataclass(frozen=True, slots=True)
class TriplePattern:
    """A single subject-predicate-object pattern.

    Attributes:
        subject: IRI or variable.
        predicate: IRI of the predicate (predicates are never variables here).
        object: IRI, literal, or variable.
    """

    subject: str | Variable
    predicate: str
    object: Term

    def variables(self) -> list[Variable]:
        """Variables occurring in this pattern, subject first."""
        return [t for t in (self.subject, self.object) if isinstance(t, Variable)]


@dataclass(frozen=True, slots=True)
class GraphPattern:
    """A basic graph pattern with independent optional groups.

    Each optional group is matched on its own against the bindings produced
    by the required patterns (left join semantics). A group either binds all
    of its variables or none of them.

    Attributes:
        required: Patterns that must all match.
        optional: Groups of patterns matched independently of each other.
    """

    required: tuple[TriplePattern, ...]
    optional: tuple[tuple[TriplePattern, ...], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.required:
            msg = "GraphPattern needs at least one required triple pattern"
            raise ValueError(msg)

    def variables(self) -> list[Variable]:
        """All variables in order of first occurrence."""
        seen: dict[str, Variable] = {}
        for pattern in (*self.required, *(p for group in self.optional for p in group)):
            for var in pattern.variables():
                seen.setdefault(var.name, var)
        return list(seen.values())


Binding = dict[str, str]
"""A single solution: variable name to the bound IRI or literal value."""
