"""Unit tests for SubmissionDeletionService."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock

import pytest
from seeding import (
    OTHER_ORG,
    OTHER_ORG_ID,
    OTHER_PARTITION,
    ORG_ID,
    PARTITION,
    GraphSeeder,
)

from submission_cleanup.domain.submissions.deletion_service import (
    DeletionOutcome,
    Phase,
    SubmissionDeletionService,
)
from submission_cleanup.domain.submissions.vocabulary import (
    ADMS_STATUS,
    SENT_STATUS,
    TASK_INPUT_CONTAINER,
    TASK_RESULTS_CONTAINER,
    FileType,
)
from submission_cleanup.foundation.domain.exceptions import (
    PartialDeletionError,
    StoreFailureError,
)
from submission_cleanup.infra.content import InMemoryContentStore
from submission_cleanup.infra.triplestore import InMemoryGraphStore, TriplestoreUnavailableError

if TYPE_CHECKING:
    from submission_cleanup.domain.submissions.partition import PartitionResolver

S1 = "http://data.lblod.info/submissions/s1"
S1_ID = "s1-uuid"
D1 = "http://data.lblod.info/submission-documents/d1"
FORM = "http://data.lblod.info/form-data/fd1"
F1 = "http://data.lblod.info/files/f1"
P1 = "share://submissions/f1-additions.ttl"
LOC1 = P1
UPLOAD = "http://data.lblod.info/files/upload-1"
UPLOAD_PHYSICAL = "share://uploads/upload-1.pdf"
TASK = "http://redpencil.data.gift/id/task/t1"
JOB = "http://redpencil.data.gift/id/job/j1"
REMOTE = "http://data.lblod.info/id/remote-data-objects/r1"
DOWNLOAD = "share://downloads/r1.html"
HARVESTED = "share://harvested/r1.html"
HARVESTED_LOGICAL = "http://data.lblod.info/files/harvested-r1"


def _seed_full(seeder: GraphSeeder) -> None:
    seeder.submission(S1, S1_ID)
    seeder.document(S1, D1)
    seeder.form_data(S1, FORM)
    seeder.ttl_file(D1, FileType.ADDITIONS, F1, P1)
    seeder.ttl_file(D1, FileType.META, "share://submissions/s1-meta.ttl")
    seeder.uploaded_file(FORM, UPLOAD, UPLOAD_PHYSICAL)
    seeder.task(S1, TASK, JOB)
    seeder.container(TASK, TASK_INPUT_CONTAINER, "http://data.lblod.info/id/containers/in")
    seeder.container(
        JOB,
        TASK_RESULTS_CONTAINER,
        "http://data.lblod.info/id/containers/out",
        "http://data.lblod.info/id/harvesting-collections/c1",
    )
    seeder.harvested_file(S1, REMOTE, DOWNLOAD, HARVESTED, HARVESTED_LOGICAL)


def _journal_index(journal: list[tuple[Any, ...]], entry: tuple[Any, ...]) -> int:
    return journal.index(entry)


def _first_graph_delete_containing(journal: list[tuple[Any, ...]], uri: str) -> int:
    for index, entry in enumerate(journal):
        if entry[0] == "graph.delete" and uri in entry[2]:
            return index
    raise AssertionError(f"no statement delete for {uri}")


@pytest.mark.unit
class TestSentSubmissions:
    @pytest.mark.asyncio
    async def test_sent_submission_is_refused(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        graph_store: InMemoryGraphStore,
        content_store: InMemoryContentStore,
        journal: list[tuple[Any, ...]],
    ) -> None:
        seeder.submission(S1, S1_ID, status=SENT_STATUS)
        seeder.document(S1, D1)
        seeder.ttl_file(D1, FileType.ADDITIONS, F1, P1)
        graph_before = graph_store.snapshot()
        content_before = content_store.locations

        result = await service.delete_submission(S1_ID)

        assert result.outcome is DeletionOutcome.CONFLICT
        assert result.submission_uri == S1
        assert result.document_uri == D1
        assert S1 in result.message
        assert graph_store.snapshot() == graph_before
        assert content_store.locations == content_before
        assert journal == []

    @pytest.mark.asyncio
    async def test_second_status_sent_is_refused(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        graph_store: InMemoryGraphStore,
        journal: list[tuple[Any, ...]],
    ) -> None:
        seeder.submission(S1, S1_ID)
        graph_store.add(PARTITION, S1, ADMS_STATUS, SENT_STATUS)
        before = graph_store.snapshot()

        result = await service.delete_submission(S1_ID)

        assert result.outcome is DeletionOutcome.CONFLICT
        assert graph_store.snapshot() == before
        assert journal == []


@pytest.mark.unit
class TestNotFound:
    @pytest.mark.asyncio
    async def test_unknown_id_mutates_nothing(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        graph_store: InMemoryGraphStore,
        journal: list[tuple[Any, ...]],
    ) -> None:
        seeder.submission(S1, S1_ID)
        before = graph_store.snapshot()

        result = await service.delete_submission("does-not-exist")

        assert result.outcome is DeletionOutcome.NOT_FOUND
        assert "does-not-exist" in result.message
        assert graph_store.snapshot() == before
        assert journal == []

    @pytest.mark.asyncio
    async def test_second_delete_reports_not_found(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
    ) -> None:
        _seed_full(seeder)

        first = await service.delete_submission(S1_ID)
        second = await service.delete_submission(S1_ID)

        assert first.outcome is DeletionOutcome.DELETED
        assert second.outcome is DeletionOutcome.NOT_FOUND

    @pytest.mark.asyncio
    async def test_unusable_uri_is_not_found(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        graph_store: InMemoryGraphStore,
        journal: list[tuple[Any, ...]],
    ) -> None:
        seeder.submission(S1, S1_ID)
        before = graph_store.snapshot()

        result = await service.delete_submission_by_uri("http://x/a b")

        assert result.outcome is DeletionOutcome.NOT_FOUND
        assert graph_store.snapshot() == before
        assert journal == []

    @pytest.mark.asyncio
    async def test_submission_outside_tenant_partition_is_not_found(
        self,
        service: SubmissionDeletionService,
        graph_store: InMemoryGraphStore,
        content_store: InMemoryContentStore,
    ) -> None:
        # Created by one organization but stored in another's partition
        GraphSeeder(graph_store, content_store, OTHER_PARTITION).submission(S1, S1_ID)

        result = await service.delete_submission(S1_ID)

        assert result.outcome is DeletionOutcome.NOT_FOUND

    @pytest.mark.asyncio
    async def test_unknown_uri_is_not_found(self, service: SubmissionDeletionService) -> None:
        result = await service.delete_submission_by_uri(S1)
        assert result.outcome is DeletionOutcome.NOT_FOUND
        assert result.submission_uri == S1


@pytest.mark.unit
class TestMinimalSubmission:
    @pytest.mark.asyncio
    async def test_bare_submission_deletes_only_its_own_statements(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        graph_store: InMemoryGraphStore,
        journal: list[tuple[Any, ...]],
    ) -> None:
        seeder.submission(S1, S1_ID)
        seeder.submission("http://data.lblod.info/submissions/s2", "s2-uuid")
        before = graph_store.snapshot()

        result = await service.delete_submission(S1_ID)

        assert result.outcome is DeletionOutcome.DELETED
        removed = before - graph_store.snapshot()
        assert removed
        assert {quad[1] for quad in removed} == {S1}
        assert {quad[0] for quad in removed} == {PARTITION}
        assert result.deleted == (S1,)
        assert journal == [("graph.delete", PARTITION, (S1,))]

    @pytest.mark.asyncio
    async def test_task_without_harvested_files_still_succeeds(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        graph_store: InMemoryGraphStore,
        journal: list[tuple[Any, ...]],
    ) -> None:
        seeder.submission(S1, S1_ID)
        seeder.task(S1, TASK, JOB)

        result = await service.delete_submission(S1_ID)

        assert result.outcome is DeletionOutcome.DELETED
        assert [entry for entry in journal if entry[0] == "content.delete"] == []
        assert ("graph.delete", PARTITION, (TASK, JOB)) in journal
        assert graph_store.subjects(PARTITION) == set()


@pytest.mark.unit
class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_document_with_additions_file(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        graph_store: InMemoryGraphStore,
        content_store: InMemoryContentStore,
        journal: list[tuple[Any, ...]],
    ) -> None:
        seeder.submission(S1, S1_ID)
        seeder.document(S1, D1)
        seeder.ttl_file(D1, FileType.ADDITIONS, F1, P1)
        GraphSeeder(graph_store, content_store, OTHER_PARTITION).submission(
            "http://data.lblod.info/submissions/other",
            "other-uuid",
            organization=OTHER_ORG,
            organization_id=OTHER_ORG_ID,
        )
        other_before = {q for q in graph_store.snapshot() if q[0] == OTHER_PARTITION}

        result = await service.delete_submission(S1_ID)

        assert result.outcome is DeletionOutcome.DELETED
        assert f"<{S1}>" in result.message
        assert journal == [
            ("content.delete", LOC1),
            ("graph.delete", PARTITION, (P1, F1)),
            ("graph.delete", PARTITION, (D1,)),
            ("graph.delete", PARTITION, (S1,)),
        ]
        assert all(entry[1] == PARTITION for entry in journal if entry[0] == "graph.delete")
        assert LOC1 not in content_store
        assert graph_store.subjects(PARTITION) == set()
        assert {q for q in graph_store.snapshot() if q[0] == OTHER_PARTITION} == other_before

    @pytest.mark.asyncio
    async def test_full_graph_is_removed_in_phase_order(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        graph_store: InMemoryGraphStore,
        content_store: InMemoryContentStore,
        journal: list[tuple[Any, ...]],
    ) -> None:
        _seed_full(seeder)

        result = await service.delete_submission(S1_ID)

        assert result.outcome is DeletionOutcome.DELETED
        assert graph_store.subjects(PARTITION) == set()
        assert content_store.locations == set()

        harvested = _first_graph_delete_containing(journal, REMOTE)
        uploaded = _first_graph_delete_containing(journal, UPLOAD)
        ttl = _first_graph_delete_containing(journal, F1)
        task_chain = _first_graph_delete_containing(journal, TASK)
        form = _first_graph_delete_containing(journal, FORM)
        document = _first_graph_delete_containing(journal, D1)
        submission = _first_graph_delete_containing(journal, S1)
        assert harvested < uploaded < ttl < task_chain < form < document < submission
        assert submission == len(journal) - 1

    @pytest.mark.asyncio
    async def test_harvested_content_goes_before_its_metadata(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        journal: list[tuple[Any, ...]],
    ) -> None:
        _seed_full(seeder)

        await service.delete_submission(S1_ID)

        download = _journal_index(journal, ("content.delete", DOWNLOAD))
        harvested = _journal_index(journal, ("content.delete", HARVESTED))
        metadata = _journal_index(
            journal,
            ("graph.delete", PARTITION, (REMOTE, DOWNLOAD, HARVESTED, HARVESTED_LOGICAL)),
        )
        assert download < harvested < metadata

    @pytest.mark.asyncio
    async def test_task_chain_is_deleted_together(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        journal: list[tuple[Any, ...]],
    ) -> None:
        _seed_full(seeder)

        await service.delete_submission(S1_ID)

        assert (
            "graph.delete",
            PARTITION,
            (
                TASK,
                JOB,
                "http://data.lblod.info/id/containers/in",
                "http://data.lblod.info/id/containers/out",
                "http://data.lblod.info/id/harvesting-collections/c1",
            ),
        ) in journal


@pytest.mark.unit
class TestOrdering:
    @pytest.mark.asyncio
    async def test_uploaded_content_deleted_before_metadata(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        journal: list[tuple[Any, ...]],
    ) -> None:
        seeder.submission(S1, S1_ID)
        seeder.form_data(S1, FORM)
        seeder.uploaded_file(FORM, UPLOAD, UPLOAD_PHYSICAL)

        await service.delete_submission(S1_ID)

        content = _journal_index(journal, ("content.delete", UPLOAD_PHYSICAL))
        metadata = _journal_index(
            journal, ("graph.delete", PARTITION, (UPLOAD_PHYSICAL, UPLOAD))
        )
        assert content < metadata


@pytest.mark.unit
class TestOwnership:
    @pytest.mark.asyncio
    async def test_matching_organization_deletes(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
    ) -> None:
        seeder.submission(S1, S1_ID)
        result = await service.delete_submission_by_uri(S1, organization_id=ORG_ID)
        assert result.outcome is DeletionOutcome.DELETED

    @pytest.mark.asyncio
    async def test_other_organization_is_forbidden(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        graph_store: InMemoryGraphStore,
        journal: list[tuple[Any, ...]],
    ) -> None:
        seeder.submission(S1, S1_ID)
        before = graph_store.snapshot()

        result = await service.delete_submission_by_uri(S1, organization_id=OTHER_ORG_ID)

        assert result.outcome is DeletionOutcome.FORBIDDEN
        assert graph_store.snapshot() == before
        assert journal == []


@pytest.mark.unit
class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_content_failure_keeps_metadata(
        self,
        graph_store: InMemoryGraphStore,
        resolver: PartitionResolver,
        journal: list[tuple[Any, ...]],
    ) -> None:
        content_store = InMemoryContentStore(journal=journal, failing={UPLOAD_PHYSICAL})
        seeder = GraphSeeder(graph_store, content_store)
        seeder.submission(S1, S1_ID)
        seeder.form_data(S1, FORM)
        seeder.uploaded_file(FORM, UPLOAD, UPLOAD_PHYSICAL)
        service = SubmissionDeletionService(graph_store, content_store, resolver)

        with pytest.raises(StoreFailureError) as exc_info:
            await service.delete_submission(S1_ID)

        assert exc_info.value.phase == Phase.UPLOADED_FILES.value
        assert exc_info.value.entity == UPLOAD_PHYSICAL
        assert exc_info.value.context["submission_uri"] == S1
        assert UPLOAD in graph_store.subjects(PARTITION)
        assert UPLOAD_PHYSICAL in graph_store.subjects(PARTITION)
        assert S1 in graph_store.subjects(PARTITION)
        assert not any(entry[0] == "graph.delete" for entry in journal)

    @pytest.mark.asyncio
    async def test_lookup_failure_is_store_failure(
        self,
        content_store: InMemoryContentStore,
        resolver: PartitionResolver,
    ) -> None:
        graph_store = AsyncMock()
        graph_store.match.side_effect = TriplestoreUnavailableError("down")
        service = SubmissionDeletionService(graph_store, content_store, resolver)

        with pytest.raises(StoreFailureError) as exc_info:
            await service.delete_submission(S1_ID)

        assert exc_info.value.phase == Phase.LOOKUP.value
        assert not isinstance(exc_info.value, PartialDeletionError)


class _SlowContentStore(InMemoryContentStore):
    """Content store whose second delete never finishes in time."""

    async def delete(self, location: str) -> None:
        if self.journal and any(entry[0] == "content.delete" for entry in self.journal):
            await asyncio.sleep(10)
        await super().delete(location)


class _SlowGraphStore(InMemoryGraphStore):
    """Graph store whose every query takes a while."""

    async def match(self, *args: Any, **kwargs: Any) -> Any:
        await asyncio.sleep(0.05)
        return await super().match(*args, **kwargs)


@pytest.mark.unit
class TestDeadline:
    @pytest.mark.asyncio
    async def test_timeout_after_mutation_is_partial_deletion(
        self,
        graph_store: InMemoryGraphStore,
        resolver: PartitionResolver,
        journal: list[tuple[Any, ...]],
    ) -> None:
        content_store = _SlowContentStore(journal=journal)
        seeder = GraphSeeder(graph_store, content_store)
        seeder.submission(S1, S1_ID)
        seeder.form_data(S1, FORM)
        seeder.uploaded_file(FORM, UPLOAD, UPLOAD_PHYSICAL)
        seeder.uploaded_file(FORM, UPLOAD + "-2", UPLOAD_PHYSICAL + ".2")
        service = SubmissionDeletionService(
            graph_store, content_store, resolver, deadline=0.05
        )

        with pytest.raises(PartialDeletionError) as exc_info:
            await service.delete_submission(S1_ID)

        steps = exc_info.value.completed_steps
        assert f"uploaded_files:content:{UPLOAD_PHYSICAL}" in steps
        assert f"uploaded_files:statements:{UPLOAD}" in steps
        assert exc_info.value.phase == Phase.UPLOADED_FILES.value
        assert S1 in graph_store.subjects(PARTITION)

    @pytest.mark.asyncio
    async def test_deadline_covers_lookups(
        self,
        content_store: InMemoryContentStore,
        resolver: PartitionResolver,
        journal: list[tuple[Any, ...]],
    ) -> None:
        graph_store = _SlowGraphStore(journal=journal)
        seeder = GraphSeeder(graph_store, content_store)
        _seed_full(seeder)
        before = graph_store.snapshot()
        # Each query fits the deadline on its own, the lookups together do not
        service = SubmissionDeletionService(
            graph_store, content_store, resolver, deadline=0.12
        )

        with pytest.raises(StoreFailureError) as exc_info:
            await service.delete_submission(S1_ID)

        assert not isinstance(exc_info.value, PartialDeletionError)
        assert exc_info.value.phase == Phase.LOOKUP.value
        assert exc_info.value.entity == S1_ID
        assert graph_store.snapshot() == before
        assert journal == []


@pytest.mark.unit
class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_deletes_are_serialized(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
    ) -> None:
        _seed_full(seeder)

        results = await asyncio.gather(
            service.delete_submission(S1_ID),
            service.delete_submission(S1_ID),
        )

        outcomes = sorted(result.outcome.value for result in results)
        assert outcomes == [DeletionOutcome.DELETED.value, DeletionOutcome.NOT_FOUND.value]


@pytest.mark.unit
class TestWarnings:
    @pytest.mark.asyncio
    async def test_duplicate_ttl_files_are_reported(
        self,
        service: SubmissionDeletionService,
        seeder: GraphSeeder,
        content_store: InMemoryContentStore,
    ) -> None:
        seeder.submission(S1, S1_ID)
        seeder.document(S1, D1)
        seeder.ttl_file(D1, FileType.META, "share://submissions/a-meta.ttl")
        seeder.ttl_file(D1, FileType.META, "share://submissions/b-meta.ttl")

        result = await service.delete_submission(S1_ID)

        assert result.outcome is DeletionOutcome.DELETED
        assert len(result.warnings) == 1
        assert "share://submissions/a-meta.ttl" not in content_store
        assert "share://submissions/b-meta.ttl" in content_store
