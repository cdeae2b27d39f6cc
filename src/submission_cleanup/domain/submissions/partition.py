"""Tenant partition naming."""

from __future__ import annotations

from submission_cleanup.domain.submissions.settings import DEFAULT_PARTITION_PLACEHOLDER
from submission_cleanup.foundation.domain.exceptions import ConfigurationError


class PartitionResolver:
    """Maps a tenant (organization) id to the named graph holding its data.

    The template must contain the placeholder exactly once. This is checked
    on construction so a bad template stops the service at startup.

    Example:
        >>> resolver = PartitionResolver("http://g/~ORGANIZATION_ID~/data")
        >>> resolver.resolve("abc")
        'http://g/abc/data'
    """

    def __init__(self, template: str, placeholder: str = DEFAULT_PARTITION_PLACEHOLDER) -> None:
        occurrences = template.count(placeholder) if placeholder else 0
        if occurrences != 1:
            raise ConfigurationError(
                "Partition graph template must contain the placeholder exactly once",
                context={
                    "template": template,
                    "placeholder": placeholder,
                    "occurrences": occurrences,
                },
            )
        self._template = template
        self._placeholder = placeholder

    @property
    def template(self) -> str:
        return self._template

    def resolve(self, tenant_id: str) -> str:
        """Return the partition IRI for ``tenant_id``."""
        if not tenant_id:
            msg = "tenant_id must be a non-empty string"
            raise ValueError(msg)
        return self._template.replace(self._placeholder, tenant_id)
