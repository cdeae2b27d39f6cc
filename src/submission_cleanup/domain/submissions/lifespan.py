"""Lifespan hook wiring the submission services onto ``app.state``.

Startup builds, in order: the partition resolver (failing fast on a bad
template), the SPARQL client and graph store, the share-volume content
store, the lock provider and the services using them. Shutdown closes the
SPARQL client and, if used, the Redis client.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from submission_cleanup.domain.submissions.deletion_service import SubmissionDeletionService
from submission_cleanup.domain.submissions.infrastructure import (
    ErrorAlertReporter,
    VendorCredentialVerifier,
)
from submission_cleanup.domain.submissions.locking import (
    InMemorySubmissionLocks,
    RedisSubmissionLocks,
)
from submission_cleanup.domain.submissions.partition import PartitionResolver
from submission_cleanup.domain.submissions.settings import get_cleanup_settings
from submission_cleanup.foundation.application.contributions import (
    LIFESPAN_PRIORITY_SERVICES,
    LifespanContribution,
)
from submission_cleanup.infra.content import ShareVolumeContentStore
from submission_cleanup.infra.persistence import RedisFactory
from submission_cleanup.infra.triplestore import (
    SparqlClient,
    SparqlGraphStore,
    get_triplestore_settings,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from submission_cleanup.domain.submissions.locking import SubmissionLockProvider

logger = logging.getLogger(__name__)


@asynccontextmanager
async def submissions_lifespan(app: Any) -> AsyncIterator[None]:
    """Build the deletion service and its collaborators for the app's lifetime."""
    settings = get_cleanup_settings()
    resolver = PartitionResolver(
        settings.partition_graph_template,
        settings.partition_placeholder,
    )

    client = SparqlClient(get_triplestore_settings())
    graph_store = SparqlGraphStore(client)

    redis_factory: RedisFactory | None = None
    locks: SubmissionLockProvider
    if settings.lock_backend == "redis":
        redis_factory = RedisFactory.from_env()
        locks = RedisSubmissionLocks(redis_factory, timeout=settings.lock_timeout_seconds)
    else:
        locks = InMemorySubmissionLocks()

    app.state.graph_store = graph_store
    app.state.redis_factory = redis_factory
    app.state.deletion_service = SubmissionDeletionService(
        graph_store,
        ShareVolumeContentStore(settings.share_root),
        resolver,
        lock_provider=locks,
        deadline=settings.deletion_deadline,
    )
    app.state.credential_verifier = VendorCredentialVerifier(
        graph_store,
        credential_graph=settings.credential_graph,
    )
    app.state.error_alerts = ErrorAlertReporter(
        client,
        graph=settings.error_graph,
        creator=settings.error_creator,
    )
    logger.info(
        "submissions_services_started",
        extra={
            "endpoint": client.endpoint,
            "partition_template": resolver.template,
            "lock_backend": settings.lock_backend,
        },
    )
    try:
        yield
    finally:
        await client.aclose()
        if redis_factory is not None:
            await redis_factory.close()
        logger.info("submissions_services_stopped")


lifespan_contribution = LifespanContribution(
    hook=submissions_lifespan,
    priority=LIFESPAN_PRIORITY_SERVICES,
)
