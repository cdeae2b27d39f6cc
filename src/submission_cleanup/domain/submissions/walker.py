"""Discovery of every entity that must be removed along with a submission."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from submission_cleanup.domain.submissions.dependency_schema import (
    DEFAULT_SCHEMA,
    DependencySchema,
    Origin,
    RelationPath,
)
from submission_cleanup.domain.submissions.vocabulary import FileType

if TYPE_CHECKING:
    from submission_cleanup.domain.submissions.locator import SubmissionRecordSet
    from submission_cleanup.foundation.domain.graph_patterns import Binding
    from submission_cleanup.foundation.domain.ports import GraphStorePort

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FilePair:
    """A logical file record and the physical file holding its bytes.

    TTL derivative files may have no separate physical record; the logical
    URI is then itself the content location.
    """

    logical: str
    physical: str | None = None

    @property
    def location(self) -> str:
        return self.physical or self.logical

    @property
    def metadata_uris(self) -> tuple[str, ...]:
        return (self.physical, self.logical) if self.physical else (self.logical,)


@dataclass(frozen=True, slots=True)
class HarvestedFileChain:
    """A remote file referenced by the submission and its harvested copy."""

    remote: str
    physical: str
    harvested_physical: str
    harvested_logicals: tuple[str, ...] = ()

    @property
    def content_locations(self) -> tuple[str, str]:
        """Content to remove, physical download first."""
        return (self.physical, self.harvested_physical)

    @property
    def metadata_uris(self) -> tuple[str, ...]:
        return (self.remote, self.physical, self.harvested_physical, *self.harvested_logicals)


@dataclass(frozen=True, slots=True)
class TaskChain:
    """The task that registered a submission, its job and their containers."""

    task: str
    job: str
    containers: tuple[str, ...] = ()
    collections: tuple[str, ...] = ()

    @property
    def uris(self) -> tuple[str, ...]:
        return (self.task, self.job, *self.containers, *self.collections)


@dataclass(slots=True)
class DependentEntitySet:
    """Everything discovered for one submission, grouped by kind.

    Attributes:
        ttl_files: At most one file per derivative type.
        uploaded_files: Files uploaded with the form data.
        harvested_files: Remote files with their harvested copies.
        task_chain: The registering task and its job, if any.
        warnings: Anomalies met while walking (e.g. duplicate TTL files).
    """

    ttl_files: dict[FileType, FilePair] = field(default_factory=dict)
    uploaded_files: list[FilePair] = field(default_factory=list)
    harvested_files: list[HarvestedFileChain] = field(default_factory=list)
    task_chain: TaskChain | None = None
    warnings: list[str] = field(default_factory=list)


def _origin_uri(records: SubmissionRecordSet, origin: Origin) -> str | None:
    return getattr(records, origin.value)


class DependencyWalker:
    """Walks a :class:`DependencySchema` from a located submission.

    Each sub-walk returns an empty result rather than failing when nothing
    matches; only store errors propagate.

    Example:
        >>> walker = DependencyWalker(graph_store)
        >>> dependents = await walker.discover(records, partition)
        >>> [pair.location for pair in dependents.uploaded_files]
        ['share://a.pdf']
    """

    def __init__(self, store: GraphStorePort, schema: DependencySchema = DEFAULT_SCHEMA) -> None:
        self._store = store
        self._schema = schema

    async def walk(
        self,
        path: RelationPath,
        records: SubmissionRecordSet,
        partition: str,
    ) -> list[Binding]:
        """Return the solutions of ``path``, or nothing when its origin is absent."""
        origin_uri = _origin_uri(records, path.origin)
        if origin_uri is None:
            return []
        return await self._store.match(path.compile(origin_uri), partition=partition)

    async def discover(
        self,
        records: SubmissionRecordSet,
        partition: str,
    ) -> DependentEntitySet:
        dependents = DependentEntitySet()

        for file_type, path in self._schema.ttl_files.items():
            pair = self._pick_ttl_file(
                file_type, await self.walk(path, records, partition), dependents
            )
            if pair is not None:
                dependents.ttl_files[file_type] = pair

        rows = await self.walk(self._schema.uploaded_files, records, partition)
        dependents.uploaded_files = sorted(
            {FilePair(row["file"], row["physical"]) for row in rows},
            key=lambda pair: (pair.logical, pair.location),
        )

        if records.task is not None:
            rows = await self.walk(self._schema.harvested_files, records, partition)
            dependents.harvested_files = _group_harvested(rows)
            dependents.task_chain = await self._task_chain(records, partition)

        logger.info(
            "submission_dependents_discovered",
            extra={
                "submission": records.submission,
                "ttl_files": len(dependents.ttl_files),
                "uploaded_files": len(dependents.uploaded_files),
                "harvested_files": len(dependents.harvested_files),
                "task_chain": dependents.task_chain is not None,
            },
        )
        return dependents

    def _pick_ttl_file(
        self,
        file_type: FileType,
        rows: list[Binding],
        dependents: DependentEntitySet,
    ) -> FilePair | None:
        pairs = sorted(
            {FilePair(row["file"], row.get("physical")) for row in rows},
            key=lambda pair: (pair.logical, pair.location),
        )
        if not pairs:
            return None
        if len(pairs) > 1:
            warning = (
                f"Found {len(pairs)} {file_type.name.lower()} files for one document, "
                f"deleting only {pairs[0].logical}"
            )
            logger.warning(
                "ttl_file_ambiguous",
                extra={"file_type": file_type.value, "candidates": [p.logical for p in pairs]},
            )
            dependents.warnings.append(warning)
        return pairs[0]

    async def _task_chain(self, records: SubmissionRecordSet, partition: str) -> TaskChain | None:
        if records.task is None or records.job is None:
            return None
        containers: set[str] = set()
        collections: set[str] = set()
        for path in self._schema.task_chain:
            for row in await self.walk(path, records, partition):
                containers.add(row["container"])
                if "collection" in row:
                    collections.add(row["collection"])
        return TaskChain(
            task=records.task,
            job=records.job,
            containers=tuple(sorted(containers)),
            collections=tuple(sorted(collections)),
        )


def _group_harvested(rows: list[Binding]) -> list[HarvestedFileChain]:
    grouped: dict[tuple[str, str, str], set[str]] = {}
    for row in rows:
        key = (row["remote"], row["physical"], row["harvested_physical"])
        logicals = grouped.setdefault(key, set())
        if "harvested_logical" in row:
            logicals.add(row["harvested_logical"])
    return [
        HarvestedFileChain(remote, physical, harvested_physical, tuple(sorted(logicals)))
        for (remote, physical, harvested_physical), logicals in sorted(grouped.items())
    ]
