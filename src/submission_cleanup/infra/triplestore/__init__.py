"""Submission Clean-up Infra Triplestore — SPARQL client and graph store adapters."""

from submission_cleanup.infra.triplestore.client import SparqlClient
from submission_cleanup.infra.triplestore.errors import (
    TriplestoreError,
    TriplestoreQueryError,
    TriplestoreUnavailableError,
)
from submission_cleanup.infra.triplestore.graph_store import SparqlGraphStore
from submission_cleanup.infra.triplestore.memory import InMemoryGraphStore
from submission_cleanup.infra.triplestore.settings import (
    TriplestoreSettings,
    get_triplestore_settings,
)

__all__ = [
    "InMemoryGraphStore",
    "SparqlClient",
    "SparqlGraphStore",
    "TriplestoreError",
    "TriplestoreQueryError",
    "TriplestoreSettings",
    "TriplestoreUnavailableError",
    "get_triplestore_settings",
]
