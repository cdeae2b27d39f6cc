"""Submission Clean-up Foundation Domain -- pure Python domain primitives.

This package provides the foundational building blocks shared by the
infrastructure adapters and the submission domain: exceptions, graph
pattern value objects, and store port interfaces.
"""

from submission_cleanup.foundation.domain.exceptions import (
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    DomainError,
    NotFoundError,
    PartialDeletionError,
    StoreFailureError,
    ValidationError,
)
from submission_cleanup.foundation.domain.graph_patterns import (
    Binding,
    GraphPattern,
    Literal,
    Term,
    TriplePattern,
    Variable,
)
from submission_cleanup.foundation.domain.ports import ContentStorePort, GraphStorePort

__all__ = [
    "AuthorizationError",
    "Binding",
    "ConfigurationError",
    "ConflictError",
    "ContentStorePort",
    "DomainError",
    "GraphPattern",
    "GraphStorePort",
    "Literal",
    "NotFoundError",
    "PartialDeletionError",
    "StoreFailureError",
    "Term",
    "TriplePattern",
    "ValidationError",
    "Variable",
]
