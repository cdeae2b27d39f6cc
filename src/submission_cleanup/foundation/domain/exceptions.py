"""Errors raised by the clean-up service.

Every error carries a machine-readable ``error_code`` and a ``context``
dict; the FastAPI layer turns both into a problem-details response and the
log formatter prints the context inline.

Example:
    >>> from submission_cleanup.foundation.domain.exceptions import NotFoundError
    >>> raise NotFoundError("Submission", "5f0c4c6e-3b9a-4a43-8c38-0c1e6b1f8e21")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from uuid import UUID

__all__ = [
    "AuthorizationError",
    "ConfigurationError",
    "ConflictError",
    "DomainError",
    "NotFoundError",
    "PartialDeletionError",
    "StoreFailureError",
    "ValidationError",
]


class DomainError(Exception):
    """Base error; answered with 400 unless a subclass maps elsewhere.

    Attributes:
        message: Human-readable description.
        context: Identifiers (URIs, ids, phases) for logs and problem bodies.
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, context={self.context!r})"


class NotFoundError(DomainError):
    """No submission (or other resource) under the given id or URI. HTTP 404.

    Example:
        >>> str(NotFoundError("Submission", "5f0c4c6e"))
        'Submission not found: 5f0c4c6e (resource_type=Submission, resource_id=5f0c4c6e)'
    """

    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: UUID | str, **extra_context: Any) -> None:
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": str(resource_id), **extra_context},
        )


class ValidationError(DomainError):
    """A delete request that cannot be read: wrong content type, bad JSON,
    no subject. HTTP 422.
    """

    error_code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str, **extra_context: Any) -> None:
        self.field = field
        self.reason = reason
        super().__init__(
            f"Validation failed for '{field}': {reason}",
            {"field": field, "reason": reason, **extra_context},
        )


class ConflictError(DomainError):
    """The submission is past the point where it may be deleted. HTTP 409.

    Also raised when another replica holds the submission's lock. ``reason``
    is kept out of ``context`` so callers can add it where they need it.

    Example:
        >>> raise ConflictError(
        ...     "has already been sent",
        ...     submission_uri="http://data.lblod.info/submissions/1",
        ... )
    """

    error_code: str = "CONFLICT"

    def __init__(self, reason: str, **context: Any) -> None:
        self.reason = reason
        super().__init__(f"Conflict: {reason}", context)


class AuthorizationError(DomainError):
    """The vendor may not act for the organization, or the submission
    belongs to another organization. HTTP 403.
    """

    error_code: str = "AUTHORIZATION_ERROR"


class ConfigurationError(DomainError):
    """Invalid service configuration; raised during startup only."""

    error_code: str = "CONFIGURATION_ERROR"


class StoreFailureError(DomainError):
    """A store call failed while locating or deleting a submission. HTTP 500.

    Whatever was removed before the failure stays removed. ``phase`` and
    ``entity`` say where to pick up by hand.

    Example:
        >>> raise StoreFailureError(
        ...     "Content deletion failed",
        ...     phase="uploaded_files",
        ...     entity="share://abc.pdf",
        ... )
    """

    error_code: str = "STORE_FAILURE"

    def __init__(
        self,
        message: str,
        *,
        phase: str,
        entity: str | None = None,
        **extra_context: Any,
    ) -> None:
        self.phase = phase
        self.entity = entity
        context: dict[str, Any] = {"phase": phase, **extra_context}
        if entity is not None:
            context["entity"] = entity
        super().__init__(message, context)


class PartialDeletionError(StoreFailureError):
    """The deletion deadline passed after some data was already removed."""

    error_code: str = "PARTIAL_DELETION"

    def __init__(
        self,
        message: str,
        *,
        phase: str,
        completed_steps: list[str],
        **extra_context: Any,
    ) -> None:
        self.completed_steps = completed_steps
        super().__init__(
            message,
            phase=phase,
            completed_steps=list(completed_steps),
            **extra_context,
        )
