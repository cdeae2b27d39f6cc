"""Shared fixtures: in-memory stores sharing one call journal, and a wired app."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from fastapi.testclient import TestClient
from seeding import CREDENTIAL_GRAPH, TEMPLATE, GraphSeeder, RecordingAlerts

from submission_cleanup.domain.submissions.deletion_service import SubmissionDeletionService
from submission_cleanup.domain.submissions.infrastructure import VendorCredentialVerifier
from submission_cleanup.domain.submissions.partition import PartitionResolver
from submission_cleanup.domain.submissions.router import router as submissions_router
from submission_cleanup.infra.content import InMemoryContentStore
from submission_cleanup.infra.fastapi import create_app, register_exception_handlers
from submission_cleanup.infra.fastapi._health import router as health_router
from submission_cleanup.infra.fastapi.app_factory import ALL_GROUPS
from submission_cleanup.infra.fastapi.middleware.request_id import (
    contribution as request_id_contribution,
)
from submission_cleanup.infra.fastapi.settings import AppSettings
from submission_cleanup.infra.triplestore import InMemoryGraphStore

if TYPE_CHECKING:
    from collections.abc import Iterator

    from fastapi import FastAPI


@pytest.fixture()
def journal() -> list[tuple[Any, ...]]:
    """Call-order trace shared by both stores."""
    return []


@pytest.fixture()
def graph_store(journal: list[tuple[Any, ...]]) -> InMemoryGraphStore:
    return InMemoryGraphStore(journal=journal)


@pytest.fixture()
def content_store(journal: list[tuple[Any, ...]]) -> InMemoryContentStore:
    return InMemoryContentStore(journal=journal)


@pytest.fixture()
def seeder(graph_store: InMemoryGraphStore, content_store: InMemoryContentStore) -> GraphSeeder:
    return GraphSeeder(graph_store, content_store)


@pytest.fixture()
def resolver() -> PartitionResolver:
    return PartitionResolver(TEMPLATE)


@pytest.fixture()
def service(
    graph_store: InMemoryGraphStore,
    content_store: InMemoryContentStore,
    resolver: PartitionResolver,
) -> SubmissionDeletionService:
    return SubmissionDeletionService(graph_store, content_store, resolver)


@pytest.fixture()
def alerts() -> RecordingAlerts:
    return RecordingAlerts()


@pytest.fixture()
def app(
    graph_store: InMemoryGraphStore,
    service: SubmissionDeletionService,
    alerts: RecordingAlerts,
) -> FastAPI:
    """App wired by hand against the in-memory stores (no entry points)."""
    app = create_app(
        AppSettings(title="Clean-up test", version="0.0.0"),
        extra_routers=[health_router, submissions_router],
        extra_middleware=[request_id_contribution],
        exclude_groups=ALL_GROUPS,
    )
    register_exception_handlers(app)
    app.state.graph_store = graph_store
    app.state.redis_factory = None
    app.state.deletion_service = service
    app.state.credential_verifier = VendorCredentialVerifier(
        graph_store,
        credential_graph=CREDENTIAL_GRAPH,
    )
    app.state.error_alerts = alerts
    return app


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
