"""Delete-request envelope posted by vendors to ``/delete-melding``.

The body is JSON or compacted JSON-LD. Keys may appear under their short
names (``publisher``, ``organization``, ``subject``), their compact IRIs
(``pav:providedBy``) or their full IRIs, and IRI values may be plain
strings or ``{"@id": ...}`` nodes.

Example::

    {
      "@context": "http://lblod.data.gift/contexts/automatische-melding/v1/context.json",
      "organization": "http://data.lblod.info/id/bestuurseenheden/974816591f2...",
      "publisher": {
        "uri": "http://data.lblod.info/vendors/abc",
        "key": "secret"
      },
      "subject": "http://data.lblod.info/submissions/5f0c4c6e"
    }
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from submission_cleanup.domain.submissions.vocabulary import (
    DCT_SUBJECT,
    MU_ACCOUNT_KEY,
    PAV_CREATED_BY,
    PAV_PROVIDED_BY,
)
from submission_cleanup.infra.triplestore.sparql import is_valid_iri

SUPPORTED_CONTENT_TYPE = re.compile(r"^application/(ld\+)?json\b", re.IGNORECASE)

REQUEST_URI_BASE = "http://data.lblod.info/submission-delete-request/"


def is_supported_content_type(content_type: str | None) -> bool:
    """Whether a ``Content-Type`` header announces JSON or JSON-LD."""
    return bool(content_type and SUPPORTED_CONTENT_TYPE.match(content_type.strip()))


def _checked_iri(value: str | None) -> str | None:
    if value and not is_valid_iri(value):
        msg = f"not a usable IRI: {value!r}"
        raise ValueError(msg)
    return value


def _node_id(value: Any) -> Any:
    if isinstance(value, dict) and "@id" in value:
        return value["@id"]
    if isinstance(value, dict) and "@value" in value:
        return value["@value"]
    return value


@dataclass(frozen=True, slots=True)
class VendorAuthentication:
    """Credentials extracted from an envelope."""

    vendor: str
    key: str
    organization: str


class Publisher(BaseModel):
    """The vendor posting the request and its API key."""

    model_config = ConfigDict(extra="allow")

    uri: str | None = Field(default=None, validation_alias=AliasChoices("uri", "@id", "id"))
    key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("key", "muAccount:key", MU_ACCOUNT_KEY),
    )

    @field_validator("uri", "key", mode="before")
    @classmethod
    def _unwrap_node(cls, v: Any) -> Any:
        return _node_id(v)

    @field_validator("uri")
    @classmethod
    def _iri(cls, v: str | None) -> str | None:
        return _checked_iri(v)


class DeleteRequestEnvelope(BaseModel):
    """Parsed delete request.

    Attributes:
        request_id: ``@id`` of the request, generated when absent.
        organization: Organization the vendor acts for.
        publisher: Vendor identity and key.
        subject: URI of the submission to delete.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    context: Any = Field(default=None, alias="@context")
    request_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("@id", "id", "uri"),
    )
    organization: str | None = Field(
        default=None,
        validation_alias=AliasChoices("organization", "createdBy", "pav:createdBy", PAV_CREATED_BY),
    )
    publisher: Publisher | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "publisher", "providedBy", "pav:providedBy", PAV_PROVIDED_BY
        ),
    )
    subject: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "subject", "submission", "dct:subject", DCT_SUBJECT
        ),
    )

    @field_validator("organization", "subject", "request_id", mode="before")
    @classmethod
    def _unwrap_node(cls, v: Any) -> Any:
        return _node_id(v)

    @field_validator("organization", "subject")
    @classmethod
    def _iri(cls, v: str | None) -> str | None:
        return _checked_iri(v)

    @field_validator("publisher", mode="before")
    @classmethod
    def _publisher_node(cls, v: Any) -> Any:
        if isinstance(v, str):
            return {"uri": v}
        return v

    def model_post_init(self, __context: Any) -> None:
        if self.request_id is None:
            self.request_id = f"{REQUEST_URI_BASE}{uuid.uuid4()}"

    @property
    def vendor(self) -> str | None:
        return self.publisher.uri if self.publisher else None

    def authentication(self) -> VendorAuthentication | None:
        """Return the credential block, or ``None`` when any part is missing."""
        key = self.publisher.key if self.publisher else None
        if not (self.vendor and key and self.organization):
            return None
        return VendorAuthentication(vendor=self.vendor, key=key, organization=self.organization)
