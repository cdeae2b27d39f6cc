"""Declarative description of what hangs off a submission.

Every dependent entity kind is reached from a known record (the submission,
its document, its form data, its task or job) by a chain of relation hops.
The chains are data; :class:`~submission_cleanup.domain.submissions.walker.DependencyWalker`
compiles each one into a single graph pattern and interprets the solutions.

Example:
    >>> path = DEFAULT_SCHEMA.uploaded_files
    >>> [hop.target for hop in path.hops]
    ['file', 'physical']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from submission_cleanup.domain.submissions.vocabulary import (
    DCT_HAS_PART,
    DCT_SOURCE,
    DCT_TYPE,
    NFO_FILE_DATA_OBJECT,
    NFO_REMOTE_DATA_OBJECT,
    NIE_DATA_SOURCE,
    NIE_HAS_PART,
    RDF_TYPE,
    TASK_HAS_HARVESTING_COLLECTION,
    TASK_INPUT_CONTAINER,
    TASK_RESULTS_CONTAINER,
    FileType,
)
from submission_cleanup.foundation.domain.graph_patterns import (
    GraphPattern,
    TriplePattern,
    Variable,
)

if TYPE_CHECKING:
    from collections.abc import Mapping


class Origin(StrEnum):
    """Records of a submission that relation paths start from."""

    SUBMISSION = "submission"
    DOCUMENT = "document"
    FORM_DATA = "form_data"
    TASK = "task"
    JOB = "job"


@dataclass(frozen=True, slots=True)
class Hop:
    """One relation step from the previous node to ``target``.

    Attributes:
        target: Variable name bound to the reached node.
        predicate: Relation IRI.
        inverse: Follow the relation backwards (``?target <predicate> ?previous``).
        rdf_type: Required ``rdf:type`` of the reached node.
        tag: Required ``dct:type`` of the reached node.
        optional: The path still matches when this hop (and every hop after
            it) finds nothing.
    """

    target: str
    predicate: str
    inverse: bool = False
    rdf_type: str | None = None
    tag: str | None = None
    optional: bool = False


@dataclass(frozen=True, slots=True)
class RelationPath:
    """A named chain of hops starting from one origin record."""

    name: str
    origin: Origin
    hops: tuple[Hop, ...]

    def __post_init__(self) -> None:
        if not self.hops or self.hops[0].optional:
            msg = f"RelationPath {self.name!r} needs a required first hop"
            raise ValueError(msg)
        seen_optional = False
        for hop in self.hops:
            if seen_optional and not hop.optional:
                msg = f"RelationPath {self.name!r}: required hop {hop.target!r} after optional hop"
                raise ValueError(msg)
            seen_optional = seen_optional or hop.optional

    @property
    def targets(self) -> tuple[str, ...]:
        return tuple(hop.target for hop in self.hops)

    def compile(self, origin_uri: str) -> GraphPattern:
        """Compile the path into one pattern anchored at ``origin_uri``.

        Required hops form the required part; the optional tail forms a
        single optional group, since each optional hop depends on the one
        before it.
        """
        required: list[TriplePattern] = []
        optional: list[TriplePattern] = []
        previous: str | Variable = origin_uri
        for hop in self.hops:
            node = Variable(hop.target)
            patterns = [
                TriplePattern(node, hop.predicate, previous)
                if hop.inverse
                else TriplePattern(previous, hop.predicate, node)
            ]
            if hop.rdf_type is not None:
                patterns.append(TriplePattern(node, RDF_TYPE, hop.rdf_type))
            if hop.tag is not None:
                patterns.append(TriplePattern(node, DCT_TYPE, hop.tag))
            (optional if hop.optional else required).extend(patterns)
            previous = node
        return GraphPattern(
            required=tuple(required),
            optional=(tuple(optional),) if optional else (),
        )


def _ttl_file_path(file_type: FileType) -> RelationPath:
    return RelationPath(
        name=f"ttl_{file_type.name.lower()}",
        origin=Origin.DOCUMENT,
        hops=(
            Hop("file", DCT_SOURCE, tag=file_type.value),
            Hop("physical", NIE_DATA_SOURCE, inverse=True, optional=True),
        ),
    )


def _container_path(origin: Origin, predicate: str, name: str) -> RelationPath:
    return RelationPath(
        name=name,
        origin=origin,
        hops=(
            Hop("container", predicate),
            Hop("collection", TASK_HAS_HARVESTING_COLLECTION, optional=True),
        ),
    )


@dataclass(frozen=True, slots=True)
class DependencySchema:
    """The full set of relation paths walked for one submission.

    Attributes:
        ttl_files: One path per derivative file type, from the document.
        uploaded_files: Files uploaded with the form, from the form data.
        harvested_files: Remote files and their harvested copies, from the
            submission. Only walked when the submission has a task.
        task_chain: Containers and harvesting collections of the task and job.
    """

    ttl_files: Mapping[FileType, RelationPath]
    uploaded_files: RelationPath
    harvested_files: RelationPath
    task_chain: tuple[RelationPath, ...] = field(default_factory=tuple)


DEFAULT_SCHEMA = DependencySchema(
    ttl_files=MappingProxyType({file_type: _ttl_file_path(file_type) for file_type in FileType}),
    uploaded_files=RelationPath(
        name="uploaded_files",
        origin=Origin.FORM_DATA,
        hops=(
            Hop("file", DCT_HAS_PART),
            Hop("physical", NIE_DATA_SOURCE, inverse=True),
        ),
    ),
    harvested_files=RelationPath(
        name="harvested_files",
        origin=Origin.SUBMISSION,
        hops=(
            Hop("remote", NIE_HAS_PART, rdf_type=NFO_REMOTE_DATA_OBJECT),
            Hop("physical", NIE_DATA_SOURCE, inverse=True, rdf_type=NFO_FILE_DATA_OBJECT),
            Hop("harvested_physical", NIE_DATA_SOURCE, inverse=True),
            Hop("harvested_logical", NIE_DATA_SOURCE, inverse=True, optional=True),
        ),
    ),
    task_chain=(
        _container_path(Origin.TASK, TASK_INPUT_CONTAINER, "task_input_containers"),
        _container_path(Origin.TASK, TASK_RESULTS_CONTAINER, "task_result_containers"),
        _container_path(Origin.JOB, TASK_INPUT_CONTAINER, "job_input_containers"),
        _container_path(Origin.JOB, TASK_RESULTS_CONTAINER, "job_result_containers"),
    ),
)
