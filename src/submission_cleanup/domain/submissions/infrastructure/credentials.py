"""Vendor API key verification against the credential graph."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from submission_cleanup.domain.submissions.vocabulary import (
    FOAF_AGENT,
    MU_ACCOUNT_CAN_ACT_ON_BEHALF_OF,
    MU_ACCOUNT_KEY,
    MU_UUID,
    RDF_TYPE,
)
from submission_cleanup.foundation.domain.graph_patterns import (
    GraphPattern,
    Literal,
    TriplePattern,
    Variable,
)

if TYPE_CHECKING:
    from submission_cleanup.domain.submissions.envelope import VendorAuthentication
    from submission_cleanup.foundation.domain.ports import GraphStorePort

logger = logging.getLogger(__name__)


class VendorCredentialVerifier:
    """Checks that a vendor key may act on behalf of an organization.

    A vendor is entitled when the credential graph holds it as a
    ``foaf:Agent`` with the given ``muAccount:key`` and a
    ``muAccount:canActOnBehalfOf`` link to the organization.

    Args:
        store: Graph store port.
        credential_graph: Named graph holding vendor credentials.
    """

    def __init__(self, store: GraphStorePort, *, credential_graph: str) -> None:
        self._store = store
        self._credential_graph = credential_graph

    async def verify(self, authentication: VendorAuthentication) -> str | None:
        """Return the organization's ``mu:uuid`` if the vendor is entitled.

        Returns:
            The organization id, or ``None`` when the key does not match,
            the vendor may not act for the organization, or the organization
            has no unique id.
        """
        vendor = authentication.vendor
        organization = Variable("organization")
        rows = await self._store.match(
            GraphPattern(
                required=(
                    TriplePattern(vendor, RDF_TYPE, FOAF_AGENT),
                    TriplePattern(vendor, MU_ACCOUNT_KEY, Literal(authentication.key)),
                    TriplePattern(vendor, MU_ACCOUNT_CAN_ACT_ON_BEHALF_OF, organization),
                )
            ),
            partition=self._credential_graph,
        )
        if authentication.organization not in {row["organization"] for row in rows}:
            logger.warning(
                "vendor_credentials_rejected",
                extra={"vendor": vendor, "organization": authentication.organization},
            )
            return None

        rows = await self._store.match(
            GraphPattern(
                required=(
                    TriplePattern(
                        authentication.organization, MU_UUID, Variable("organization_id")
                    ),
                )
            ),
            partition=None,
        )
        ids = {row["organization_id"] for row in rows}
        if len(ids) != 1:
            logger.warning(
                "organization_id_unresolved",
                extra={"organization": authentication.organization, "candidates": sorted(ids)},
            )
            return None
        return ids.pop()
