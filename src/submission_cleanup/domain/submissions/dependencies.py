"""FastAPI dependencies resolving the submission services from app state.

The services are built by the submissions lifespan hook and stored on
``app.state``; tests may put fakes there instead.
"""

# NOTE: Do NOT use ``from __future__ import annotations`` here.
# FastAPI dependency injection needs runtime-evaluable type annotations.

from fastapi import Request

from submission_cleanup.domain.submissions.deletion_service import SubmissionDeletionService
from submission_cleanup.domain.submissions.infrastructure.credentials import (
    VendorCredentialVerifier,
)


def get_deletion_service(request: Request) -> SubmissionDeletionService:
    """Deletion service from ``request.app.state.deletion_service``."""
    return request.app.state.deletion_service  # type: ignore[no-any-return]


def get_credential_verifier(request: Request) -> VendorCredentialVerifier:
    """Credential verifier from ``request.app.state.credential_verifier``."""
    return request.app.state.credential_verifier  # type: ignore[no-any-return]
