"""Error alert records written to the error graph.

Operators watch the error graph for ``oslc:Error`` resources. Every request
that ends in a 500 leaves one behind, so a partially deleted submission can
be traced and finished by hand.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from submission_cleanup.domain.submissions.vocabulary import (
    DCT_CREATED,
    DCT_CREATOR,
    DCT_REFERENCES,
    DCT_SUBJECT,
    MU_UUID,
    OSLC_ERROR,
    OSLC_LARGE_PREVIEW,
    OSLC_MESSAGE,
    RDF_TYPE,
)
from submission_cleanup.infra.triplestore.errors import TriplestoreError
from submission_cleanup.infra.triplestore.sparql import (
    escape_datetime,
    escape_string,
    escape_uri,
)

if TYPE_CHECKING:
    from submission_cleanup.infra.triplestore.client import SparqlClient

logger = logging.getLogger(__name__)

ERROR_URI_BASE = "http://data.lblod.info/errors/"
ERROR_SUBJECT = "Clean-up Submission Service"


class ErrorAlertReporter:
    """Inserts ``oslc:Error`` records through the SPARQL client.

    Storing an alert never raises; a failure is logged instead so the
    original error still reaches the caller.

    Args:
        client: SPARQL client used for the insert.
        graph: Named graph receiving the records.
        creator: IRI of this service, stamped as ``dct:creator``.
    """

    def __init__(self, client: SparqlClient, *, graph: str, creator: str) -> None:
        self._client = client
        self._graph = graph
        self._creator = creator

    def render(
        self,
        message: str,
        *,
        detail: str | None = None,
        reference: str | None = None,
        error_id: str | None = None,
        created: datetime | None = None,
    ) -> tuple[str, str]:
        """Build the ``INSERT DATA`` update for one alert.

        Returns:
            The error URI and the update text.
        """
        error_id = error_id or str(uuid.uuid4())
        error_uri = f"{ERROR_URI_BASE}{error_id}"
        subject = escape_uri(error_uri)
        statements = [
            f"{subject} {escape_uri(RDF_TYPE)} {escape_uri(OSLC_ERROR)} .",
            f"{subject} {escape_uri(MU_UUID)} {escape_string(error_id)} .",
            f"{subject} {escape_uri(DCT_SUBJECT)} {escape_string(ERROR_SUBJECT)} .",
            f"{subject} {escape_uri(OSLC_MESSAGE)} {escape_string(message)} .",
            f"{subject} {escape_uri(DCT_CREATED)} "
            f"{escape_datetime(created or datetime.now(UTC))} .",
            f"{subject} {escape_uri(DCT_CREATOR)} {escape_uri(self._creator)} .",
        ]
        if reference:
            statements.append(f"{subject} {escape_uri(DCT_REFERENCES)} {escape_uri(reference)} .")
        if detail:
            preview = escape_uri(OSLC_LARGE_PREVIEW)
            statements.append(f"{subject} {preview} {escape_string(detail)} .")
        body = "\n".join(f"    {line}" for line in statements)
        update = f"INSERT DATA {{\n  GRAPH {escape_uri(self._graph)} {{\n{body}\n  }}\n}}"
        return error_uri, update

    async def send(
        self,
        message: str,
        *,
        detail: str | None = None,
        reference: str | None = None,
    ) -> str | None:
        """Store an alert.

        Returns:
            The error URI, or ``None`` when the alert could not be stored.
        """
        try:
            error_uri, update = self.render(message, detail=detail, reference=reference)
        except ValueError as err:
            logger.warning("error_alert_invalid", extra={"alert": message, "error": str(err)})
            return None
        try:
            await self._client.update(update)
        except TriplestoreError as err:
            logger.warning(
                "error_alert_not_stored",
                extra={"alert": message, "error": str(err)},
            )
            return None
        logger.info("error_alert_stored", extra={"error_uri": error_uri})
        return error_uri
