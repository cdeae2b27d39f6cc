"""Submission Clean-up Domain Submissions — cascading deletion of unsent submissions."""

from submission_cleanup.domain.submissions.deletion_service import (
    DeletionOutcome,
    DeletionResult,
    Phase,
    SubmissionDeletionService,
)
from submission_cleanup.domain.submissions.dependency_schema import (
    DEFAULT_SCHEMA,
    DependencySchema,
    Hop,
    Origin,
    RelationPath,
)
from submission_cleanup.domain.submissions.locator import (
    SubmissionLocator,
    SubmissionRecordSet,
    TenantLocator,
)
from submission_cleanup.domain.submissions.locking import (
    InMemorySubmissionLocks,
    RedisSubmissionLocks,
    SubmissionLockProvider,
)
from submission_cleanup.domain.submissions.partition import PartitionResolver
from submission_cleanup.domain.submissions.settings import CleanupSettings, get_cleanup_settings
from submission_cleanup.domain.submissions.walker import (
    DependencyWalker,
    DependentEntitySet,
    FilePair,
    HarvestedFileChain,
    TaskChain,
)

__all__ = [
    "DEFAULT_SCHEMA",
    "CleanupSettings",
    "DeletionOutcome",
    "DeletionResult",
    "DependencySchema",
    "DependencyWalker",
    "DependentEntitySet",
    "FilePair",
    "HarvestedFileChain",
    "Hop",
    "InMemorySubmissionLocks",
    "Origin",
    "PartitionResolver",
    "Phase",
    "RedisSubmissionLocks",
    "RelationPath",
    "SubmissionDeletionService",
    "SubmissionLockProvider",
    "SubmissionLocator",
    "SubmissionRecordSet",
    "TaskChain",
    "TenantLocator",
    "get_cleanup_settings",
]
