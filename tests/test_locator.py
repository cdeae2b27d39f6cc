"""Unit tests for SubmissionLocator and TenantLocator."""

from __future__ import annotations

import pytest
from seeding import OTHER_PARTITION, ORG_ID, PARTITION, GraphSeeder

from submission_cleanup.domain.submissions.locator import (
    SubmissionLocator,
    SubmissionRecordSet,
    TenantLocator,
)
from submission_cleanup.domain.submissions.vocabulary import (
    ADMS_STATUS,
    PROV_GENERATED,
    SENT_STATUS,
)
from submission_cleanup.infra.triplestore import InMemoryGraphStore

S1 = "http://data.lblod.info/submissions/s1"
D1 = "http://data.lblod.info/submission-documents/d1"
FORM = "http://data.lblod.info/form-data/fd1"
TASK = "http://redpencil.data.gift/id/task/t1"
JOB = "http://redpencil.data.gift/id/job/j1"
OTHER_OPERATION = "http://lblod.data.gift/id/jobs/concept/TaskOperation/other"


class TestSubmissionRecordSet:
    @pytest.mark.unit
    def test_sent_status(self) -> None:
        records = SubmissionRecordSet("s1", S1, SENT_STATUS)
        assert records.is_sent is True

    @pytest.mark.unit
    def test_other_status(self) -> None:
        records = SubmissionRecordSet("s1", S1, "http://lblod.data.gift/concepts/concept")
        assert records.is_sent is False

    @pytest.mark.unit
    def test_sent_among_several_statuses(self) -> None:
        concept = "http://lblod.data.gift/concepts/concept"
        records = SubmissionRecordSet(
            "s1", S1, concept, statuses=frozenset({concept, SENT_STATUS})
        )
        assert records.is_sent is True


class TestSubmissionLocator:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_absent_submission(self, graph_store: InMemoryGraphStore) -> None:
        assert await SubmissionLocator(graph_store).locate("missing", PARTITION) is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_bare_submission(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1")

        records = await SubmissionLocator(graph_store).locate("s1", PARTITION)

        assert records is not None
        assert records.submission == S1
        assert records.document is None
        assert records.form_data is None
        assert records.task is None
        assert records.job is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_collects_every_status(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1")
        graph_store.add(PARTITION, S1, ADMS_STATUS, SENT_STATUS)

        records = await SubmissionLocator(graph_store).locate("s1", PARTITION)

        assert records is not None
        assert SENT_STATUS in records.statuses
        assert len(records.statuses) == 2
        assert records.is_sent is True

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_all_relations(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1", status=SENT_STATUS)
        seeder.document(S1, D1)
        seeder.form_data(S1, FORM)
        seeder.task(S1, TASK, JOB)

        records = await SubmissionLocator(graph_store).locate("s1", PARTITION)

        assert records == SubmissionRecordSet(
            submission_id="s1",
            submission=S1,
            status=SENT_STATUS,
            document=D1,
            form_data=FORM,
            task=TASK,
            job=JOB,
        )
        assert records.is_sent

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_relations_resolve_independently(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1")
        seeder.task(S1, TASK, JOB)

        records = await SubmissionLocator(graph_store).locate("s1", PARTITION)

        assert records is not None
        assert records.form_data is None
        assert records.document is None
        assert records.task == TASK

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_untyped_generated_record_is_not_form_data(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1")
        graph_store.add(PARTITION, S1, PROV_GENERATED, "http://data.lblod.info/other/x")

        records = await SubmissionLocator(graph_store).locate("s1", PARTITION)

        assert records is not None
        assert records.form_data is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_only_register_tasks_count(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1")
        seeder.task(S1, TASK, JOB, operation=OTHER_OPERATION)

        records = await SubmissionLocator(graph_store).locate("s1", PARTITION)

        assert records is not None
        assert records.task is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_scoped_to_partition(
        self,
        graph_store: InMemoryGraphStore,
        seeder: GraphSeeder,
    ) -> None:
        seeder.submission(S1, "s1")
        assert await SubmissionLocator(graph_store).locate("s1", OTHER_PARTITION) is None


class TestTenantLocator:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_finds_creating_organization(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1")
        assert await TenantLocator(graph_store).find_tenant("s1") == ORG_ID

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_submission_has_no_tenant(self, graph_store: InMemoryGraphStore) -> None:
        assert await TenantLocator(graph_store).find_tenant("missing") is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ambiguous_tenant_picks_first(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1", organization_id="b-org")
        seeder.organization(organization_id="a-org")

        assert await TenantLocator(graph_store).find_tenant("s1") == "a-org"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_submission_id_from_uri(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1")
        locator = TenantLocator(graph_store)

        assert await locator.find_submission_id(S1) == "s1"
        assert await locator.find_submission_id("http://data.lblod.info/submissions/x") is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_uri_must_be_a_submission(
        self, graph_store: InMemoryGraphStore, seeder: GraphSeeder
    ) -> None:
        seeder.submission(S1, "s1")
        seeder.document(S1, D1)

        assert await TenantLocator(graph_store).find_submission_id(D1) is None
