"""Cascading deletion of a submission and everything that depends on it.

A deletion runs in a fixed order so that an interrupted run never leaves a
dependent entity without the record that leads to it:

1. Harvested files (content of the download, then of its harvested copy,
   then their metadata)
2. Uploaded files (content, then metadata)
3. TTL derivative files (content, then metadata)
4. Task, job, containers and harvesting collections (together)
5. Form data
6. Submission document
7. Submission

Within each file step content goes before metadata, so a crash leaves at
worst statements pointing at missing content, never orphaned bytes. A
submission whose status is ``Sent`` is never touched.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from submission_cleanup.domain.submissions.dependency_schema import DEFAULT_SCHEMA
from submission_cleanup.domain.submissions.locator import SubmissionLocator, TenantLocator
from submission_cleanup.domain.submissions.locking import InMemorySubmissionLocks
from submission_cleanup.domain.submissions.walker import DependencyWalker
from submission_cleanup.foundation.domain.exceptions import (
    PartialDeletionError,
    StoreFailureError,
)
from submission_cleanup.infra.content.errors import ContentStoreError
from submission_cleanup.infra.observability import get_logger
from submission_cleanup.infra.triplestore.errors import TriplestoreError
from submission_cleanup.infra.triplestore.sparql import is_valid_iri

if TYPE_CHECKING:
    from collections.abc import Sequence

    from submission_cleanup.domain.submissions.dependency_schema import DependencySchema
    from submission_cleanup.domain.submissions.locator import SubmissionRecordSet
    from submission_cleanup.domain.submissions.locking import SubmissionLockProvider
    from submission_cleanup.domain.submissions.partition import PartitionResolver
    from submission_cleanup.domain.submissions.walker import DependentEntitySet
    from submission_cleanup.foundation.domain.ports import ContentStorePort, GraphStorePort

logger = get_logger(__name__)

_STORE_ERRORS = (TriplestoreError, ContentStoreError)


class DeletionOutcome(StrEnum):
    """How a deletion request ended, when it ended without a store failure."""

    DELETED = "deleted"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"


class Phase(StrEnum):
    """Steps of a deletion, in execution order after the lookups."""

    LOOKUP = "lookup"
    HARVESTED_FILES = "harvested_files"
    UPLOADED_FILES = "uploaded_files"
    TTL_FILES = "ttl_files"
    TASK_CHAIN = "task_chain"
    FORM_DATA = "form_data"
    DOCUMENT = "submission_document"
    SUBMISSION = "submission"


@dataclass(frozen=True, slots=True)
class DeletionResult:
    """Outcome of one deletion request.

    Attributes:
        outcome: What happened.
        message: Human-readable summary, suitable as a response body.
        submission_id: The submission's ``mu:uuid`` when known.
        submission_uri: The submission URI when known.
        document_uri: The submission document URI when known.
        deleted: Resources whose statements were removed, in order.
        warnings: Anomalies met along the way that did not stop the deletion.
    """

    outcome: DeletionOutcome
    message: str
    submission_id: str | None = None
    submission_uri: str | None = None
    document_uri: str | None = None
    deleted: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome is DeletionOutcome.DELETED


@dataclass(slots=True)
class _DeletionRun:
    """Progress of one deletion, for failure reports."""

    submission_uri: str
    partition: str
    phase: Phase = Phase.LOOKUP
    completed_steps: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    @property
    def mutated(self) -> bool:
        return bool(self.completed_steps)


class SubmissionDeletionService:
    """Deletes a submission together with its dependent records and files.

    Every read and write after tenant discovery is scoped to the tenant's
    partition. Deletions of the same submission id are serialized through
    the lock provider, so a repeated request finds nothing left and
    reports NOT_FOUND.

    Args:
        graph_store: Statement store port.
        content_store: Physical file content port.
        partition_resolver: Maps the tenant id to its partition.
        lock_provider: Per-submission exclusion; in-process locks by default.
        deadline: Seconds a single deletion may take, or ``None`` for no limit.
        schema: Dependency schema to walk; the default schema if omitted.

    Example:
        >>> service = SubmissionDeletionService(graph_store, content_store, resolver)
        >>> result = await service.delete_submission("5f0c4c6e")
        >>> result.outcome
        <DeletionOutcome.DELETED: 'deleted'>
    """

    def __init__(
        self,
        graph_store: GraphStorePort,
        content_store: ContentStorePort,
        partition_resolver: PartitionResolver,
        *,
        lock_provider: SubmissionLockProvider | None = None,
        deadline: float | None = None,
        schema: DependencySchema | None = None,
    ) -> None:
        self._graph = graph_store
        self._content = content_store
        self._partitions = partition_resolver
        self._locks = lock_provider or InMemorySubmissionLocks()
        self._deadline = deadline
        self._tenants = TenantLocator(graph_store)
        self._locator = SubmissionLocator(graph_store)
        self._walker = DependencyWalker(graph_store, schema or DEFAULT_SCHEMA)

    async def delete_submission(
        self,
        submission_id: str,
        *,
        organization_id: str | None = None,
    ) -> DeletionResult:
        """Delete the submission with ``mu:uuid`` ``submission_id``.

        Args:
            submission_id: The submission's ``mu:uuid``.
            organization_id: When given, the submission must belong to this
                organization; otherwise the result is FORBIDDEN.

        Returns:
            DELETED, NOT_FOUND, CONFLICT (status ``Sent``) or FORBIDDEN.

        Raises:
            StoreFailureError: A store call failed; the context names the
                phase and entity.
            PartialDeletionError: The deadline passed after data was removed.
        """
        async with self._locks.hold(submission_id):
            return await self._delete_locked(submission_id, organization_id)

    async def delete_submission_by_uri(
        self,
        submission_uri: str,
        *,
        organization_id: str | None = None,
    ) -> DeletionResult:
        """Delete the submission identified by its URI.

        Resolves the URI to the submission id first, then behaves like
        :meth:`delete_submission`.
        """
        if not is_valid_iri(submission_uri):
            logger.info("submission_not_found", submission_uri=submission_uri, reason="bad_iri")
            return DeletionResult(
                outcome=DeletionOutcome.NOT_FOUND,
                message=f"Could not find a submission for URI <{submission_uri}>",
                submission_uri=submission_uri,
            )
        try:
            submission_id = await self._tenants.find_submission_id(submission_uri)
        except _STORE_ERRORS as err:
            raise StoreFailureError(
                f"Failed to look up submission <{submission_uri}>",
                phase=Phase.LOOKUP.value,
                entity=submission_uri,
            ) from err
        if submission_id is None:
            logger.info("submission_not_found", submission_uri=submission_uri)
            return DeletionResult(
                outcome=DeletionOutcome.NOT_FOUND,
                message=f"Could not find a submission for URI <{submission_uri}>",
                submission_uri=submission_uri,
            )
        return await self.delete_submission(submission_id, organization_id=organization_id)

    async def _delete_locked(
        self,
        submission_id: str,
        organization_id: str | None,
    ) -> DeletionResult:
        log = logger.bind(submission_id=submission_id)
        not_found = DeletionResult(
            outcome=DeletionOutcome.NOT_FOUND,
            message=f"Could not find a submission for uuid '{submission_id}'",
            submission_id=submission_id,
        )

        # One deadline for the lookups and the purge together
        deadline = (
            None
            if self._deadline is None
            else asyncio.get_running_loop().time() + self._deadline
        )

        try:
            async with asyncio.timeout_at(deadline):
                tenant_id = await self._tenants.find_tenant(submission_id)
                if tenant_id is None:
                    log.info("submission_not_found", reason="no_tenant")
                    return not_found
                if organization_id is not None and tenant_id != organization_id:
                    log.warning(
                        "submission_owner_mismatch",
                        tenant_id=tenant_id,
                        organization_id=organization_id,
                    )
                    return DeletionResult(
                        outcome=DeletionOutcome.FORBIDDEN,
                        message="The submission does not belong to the requesting organization",
                        submission_id=submission_id,
                    )

                partition = self._partitions.resolve(tenant_id)
                records = await self._locator.locate(submission_id, partition)
                if records is None:
                    log.info(
                        "submission_not_found", reason="not_in_partition", partition=partition
                    )
                    return not_found

                if records.is_sent:
                    log.info("submission_delete_refused", submission_uri=records.submission)
                    return DeletionResult(
                        outcome=DeletionOutcome.CONFLICT,
                        message=(
                            f"Could not delete submission <{records.submission}>, "
                            "has already been sent"
                        ),
                        submission_id=submission_id,
                        submission_uri=records.submission,
                        document_uri=records.document,
                    )

                dependents = await self._walker.discover(records, partition)
        except TimeoutError as err:
            log.error("submission_lookup_timed_out")
            raise StoreFailureError(
                f"Lookup of submission '{submission_id}' timed out before removing anything",
                phase=Phase.LOOKUP.value,
                entity=submission_id,
            ) from err
        except _STORE_ERRORS as err:
            raise StoreFailureError(
                f"Failed to look up submission '{submission_id}'",
                phase=Phase.LOOKUP.value,
                entity=submission_id,
            ) from err

        run = _DeletionRun(submission_uri=records.submission, partition=partition)
        log = log.bind(submission_uri=records.submission, partition=partition)
        log.info("submission_deletion_started")
        try:
            async with asyncio.timeout_at(deadline):
                await self._purge(run, records, dependents)
        except TimeoutError as err:
            log.error(
                "submission_deletion_timed_out",
                phase=run.phase.value,
                completed_steps=run.completed_steps,
            )
            if run.mutated:
                raise PartialDeletionError(
                    f"Deletion of <{records.submission}> timed out after partial removal",
                    phase=run.phase.value,
                    completed_steps=run.completed_steps,
                    submission_uri=records.submission,
                ) from err
            raise StoreFailureError(
                f"Deletion of <{records.submission}> timed out before removing anything",
                phase=run.phase.value,
                entity=records.submission,
            ) from err
        except asyncio.CancelledError:
            log.error(
                "submission_deletion_cancelled",
                phase=run.phase.value,
                completed_steps=run.completed_steps,
            )
            raise

        log.info("submission_deleted", resources=len(run.deleted))
        return DeletionResult(
            outcome=DeletionOutcome.DELETED,
            message=f"successfully deleted submission <{records.submission}>.",
            submission_id=submission_id,
            submission_uri=records.submission,
            document_uri=records.document,
            deleted=tuple(run.deleted),
            warnings=tuple(dependents.warnings),
        )

    async def _purge(
        self,
        run: _DeletionRun,
        records: SubmissionRecordSet,
        dependents: DependentEntitySet,
    ) -> None:
        run.phase = Phase.HARVESTED_FILES
        for chain in dependents.harvested_files:
            for location in chain.content_locations:
                await self._delete_content(run, location)
            await self._delete_statements(run, chain.metadata_uris)

        run.phase = Phase.UPLOADED_FILES
        for pair in dependents.uploaded_files:
            await self._delete_content(run, pair.location)
            await self._delete_statements(run, pair.metadata_uris)

        run.phase = Phase.TTL_FILES
        for pair in dependents.ttl_files.values():
            await self._delete_content(run, pair.location)
            await self._delete_statements(run, pair.metadata_uris)

        if dependents.task_chain is not None:
            run.phase = Phase.TASK_CHAIN
            await self._delete_statements(run, dependents.task_chain.uris)

        if records.form_data is not None:
            run.phase = Phase.FORM_DATA
            await self._delete_statements(run, (records.form_data,))

        if records.document is not None:
            run.phase = Phase.DOCUMENT
            await self._delete_statements(run, (records.document,))

        run.phase = Phase.SUBMISSION
        await self._delete_statements(run, (records.submission,))

    async def _delete_content(self, run: _DeletionRun, location: str) -> None:
        try:
            await self._content.delete(location)
        except _STORE_ERRORS as err:
            raise self._failure(run, location, "content") from err
        run.completed_steps.append(f"{run.phase.value}:content:{location}")

    async def _delete_statements(self, run: _DeletionRun, uris: Sequence[str]) -> None:
        try:
            await self._graph.delete_resources(uris, partition=run.partition)
        except _STORE_ERRORS as err:
            raise self._failure(run, uris[0], "statements") from err
        run.deleted.extend(uris)
        run.completed_steps.extend(f"{run.phase.value}:statements:{uri}" for uri in uris)

    def _failure(self, run: _DeletionRun, entity: str, kind: str) -> StoreFailureError:
        logger.error(
            "submission_deletion_failed",
            submission_uri=run.submission_uri,
            phase=run.phase.value,
            entity=entity,
            kind=kind,
            completed_steps=run.completed_steps,
        )
        return StoreFailureError(
            f"Failed to delete {kind} of <{entity}> while deleting submission "
            f"<{run.submission_uri}>",
            phase=run.phase.value,
            entity=entity,
            submission_uri=run.submission_uri,
            completed_steps=list(run.completed_steps),
        )
