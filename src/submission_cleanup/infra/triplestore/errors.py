"""Triplestore error hierarchy.

Distinguishes transient failures (connection problems, 5xx responses)
from permanent ones (malformed queries, 4xx responses) so callers can
report which kind of remediation is needed.
"""

from __future__ import annotations


class TriplestoreError(Exception):
    """Base exception for all statement store failures."""

    #: Whether this error type is considered transient (retryable).
    transient: bool = False


class TriplestoreUnavailableError(TriplestoreError):
    """Raised when the SPARQL endpoint cannot be reached or answers 5xx.

    Typically transient — the store may recover on a later attempt.
    """

    transient: bool = True


class TriplestoreQueryError(TriplestoreError):
    """Raised when the SPARQL endpoint rejects a query or update (4xx).

    Permanent — resubmitting the same query will not help.
    """

    transient: bool = False
