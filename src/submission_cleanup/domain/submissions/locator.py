"""Lookups that find a submission, its tenant and its direct relations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from submission_cleanup.domain.submissions.vocabulary import (
    ADMS_STATUS,
    DCT_IS_PART_OF,
    DCT_SUBJECT,
    EXT_SUBMISSION_DOCUMENT,
    MEB_SUBMISSION,
    MELDING_FORM_DATA,
    MU_UUID,
    PAV_CREATED_BY,
    PROV_GENERATED,
    RDF_TYPE,
    SENT_STATUS,
    TASK_OPERATION,
    TASK_OPERATION_REGISTER,
    TASK_TASK,
)
from submission_cleanup.foundation.domain.graph_patterns import (
    GraphPattern,
    Literal,
    TriplePattern,
    Variable,
)

if TYPE_CHECKING:
    from submission_cleanup.foundation.domain.ports import GraphStorePort

logger = logging.getLogger(__name__)

_SUBMISSION = Variable("submission")
_STATUS = Variable("status")
_FORM_DATA = Variable("form_data")
_DOCUMENT = Variable("document")
_TASK = Variable("task")
_JOB = Variable("job")


@dataclass(frozen=True, slots=True)
class SubmissionRecordSet:
    """A submission and the records directly attached to it.

    Attributes:
        submission_id: The submission's ``mu:uuid``.
        submission: Submission URI.
        status: Status IRI of the first solution.
        statuses: Every status IRI the submission carries.
        document: Submission document URI, if any.
        form_data: Form data URI, if any.
        task: ``register`` task URI that generated the submission, if any.
        job: Job the task is part of; present whenever ``task`` is.
    """

    submission_id: str
    submission: str
    status: str
    document: str | None = None
    form_data: str | None = None
    task: str | None = None
    job: str | None = None
    statuses: frozenset[str] = frozenset()

    @property
    def is_sent(self) -> bool:
        # One Sent status among several still closes the submission
        return SENT_STATUS in self.statuses or self.status == SENT_STATUS


def _submission_pattern(submission_id: str) -> GraphPattern:
    return GraphPattern(
        required=(
            TriplePattern(_SUBMISSION, RDF_TYPE, MEB_SUBMISSION),
            TriplePattern(_SUBMISSION, MU_UUID, Literal(submission_id)),
            TriplePattern(_SUBMISSION, ADMS_STATUS, _STATUS),
        ),
        optional=(
            (
                TriplePattern(_SUBMISSION, PROV_GENERATED, _FORM_DATA),
                TriplePattern(_FORM_DATA, RDF_TYPE, MELDING_FORM_DATA),
            ),
            (
                TriplePattern(_SUBMISSION, DCT_SUBJECT, _DOCUMENT),
                TriplePattern(_DOCUMENT, RDF_TYPE, EXT_SUBMISSION_DOCUMENT),
            ),
            (
                TriplePattern(_TASK, RDF_TYPE, TASK_TASK),
                TriplePattern(_TASK, TASK_OPERATION, TASK_OPERATION_REGISTER),
                TriplePattern(_TASK, DCT_IS_PART_OF, _JOB),
                TriplePattern(_JOB, PROV_GENERATED, _SUBMISSION),
            ),
        ),
    )


class SubmissionLocator:
    """Finds a submission and its direct relations inside one partition."""

    def __init__(self, store: GraphStorePort) -> None:
        self._store = store

    async def locate(self, submission_id: str, partition: str) -> SubmissionRecordSet | None:
        """Return the record set of ``submission_id`` or ``None`` if absent.

        Every optional relation is resolved independently; a missing form
        data record does not hide the task, and so on. When the store holds
        several candidates for a relation the first solution wins and a
        warning is logged.
        """
        rows = await self._store.match(_submission_pattern(submission_id), partition=partition)
        if not rows:
            return None
        if len(rows) > 1:
            logger.warning(
                "submission_relations_ambiguous",
                extra={"submission_id": submission_id, "partition": partition, "rows": len(rows)},
            )
        row = rows[0]
        return SubmissionRecordSet(
            submission_id=submission_id,
            submission=row["submission"],
            status=row["status"],
            document=row.get("document"),
            form_data=row.get("form_data"),
            task=row.get("task"),
            job=row.get("job"),
            statuses=frozenset(r["status"] for r in rows),
        )


class TenantLocator:
    """Unscoped lookups that run before the partition is known."""

    def __init__(self, store: GraphStorePort) -> None:
        self._store = store

    async def find_tenant(self, submission_id: str) -> str | None:
        """Return the organization id that created ``submission_id``, if any."""
        organization = Variable("organization")
        pattern = GraphPattern(
            required=(
                TriplePattern(_SUBMISSION, MU_UUID, Literal(submission_id)),
                TriplePattern(_SUBMISSION, PAV_CREATED_BY, organization),
                TriplePattern(organization, MU_UUID, Variable("tenant_id")),
            )
        )
        rows = await self._store.match(pattern, partition=None)
        tenants = sorted({row["tenant_id"] for row in rows})
        if not tenants:
            return None
        if len(tenants) > 1:
            logger.warning(
                "submission_tenant_ambiguous",
                extra={"submission_id": submission_id, "tenants": tenants},
            )
        return tenants[0]

    async def find_submission_id(self, submission_uri: str) -> str | None:
        """Return the ``mu:uuid`` of the submission at ``submission_uri``, if any."""
        pattern = GraphPattern(
            required=(
                TriplePattern(submission_uri, RDF_TYPE, MEB_SUBMISSION),
                TriplePattern(submission_uri, MU_UUID, Variable("submission_id")),
            )
        )
        rows = await self._store.match(pattern, partition=None)
        ids = sorted({row["submission_id"] for row in rows})
        return ids[0] if ids else None
