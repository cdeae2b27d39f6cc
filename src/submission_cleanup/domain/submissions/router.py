"""HTTP routes of the clean-up service.

- ``GET /``: liveness greeting
- ``DELETE /submissions/{submission_id}``: delete by ``mu:uuid``
- ``POST /delete-melding``: vendor-authenticated delete by submission URI

Deletion outcomes other than DELETED are raised as domain exceptions and
rendered as RFC 7807 problem responses by the registered error handlers.
"""

# NOTE: Do NOT use ``from __future__ import annotations`` here.
# FastAPI resolves the ``Annotated[..., Depends(...)]`` parameters at runtime.

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError as PydanticValidationError

from submission_cleanup.domain.submissions.deletion_service import (
    DeletionOutcome,
    DeletionResult,
    SubmissionDeletionService,
)
from submission_cleanup.domain.submissions.dependencies import (
    get_credential_verifier,
    get_deletion_service,
)
from submission_cleanup.domain.submissions.envelope import (
    DeleteRequestEnvelope,
    is_supported_content_type,
)
from submission_cleanup.domain.submissions.infrastructure.credentials import (
    VendorCredentialVerifier,
)
from submission_cleanup.foundation.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["submissions"])

DeletionServiceDep = Annotated[SubmissionDeletionService, Depends(get_deletion_service)]
CredentialVerifierDep = Annotated[VendorCredentialVerifier, Depends(get_credential_verifier)]


def raise_for_outcome(result: DeletionResult, *, resource_id: str) -> None:
    """Raise the domain exception matching a non-DELETED outcome."""
    if result.outcome is DeletionOutcome.NOT_FOUND:
        raise NotFoundError("Submission", resource_id)
    if result.outcome is DeletionOutcome.CONFLICT:
        raise ConflictError(
            result.message,
            submission_uri=result.submission_uri,
            document_uri=result.document_uri,
        )
    if result.outcome is DeletionOutcome.FORBIDDEN:
        raise AuthorizationError(
            result.message,
            context={"submission_id": result.submission_id},
        )


@router.get("/", response_class=PlainTextResponse)
async def hello() -> str:
    return "Hello from clean-up-submission-service"


@router.delete("/submissions/{submission_id}", response_class=PlainTextResponse)
async def delete_submission(submission_id: str, service: DeletionServiceDep) -> str:
    """Delete a submission and its dependents by ``mu:uuid``.

    Responds 200 with a message, 404 when unknown, 409 when already sent.
    """
    result = await service.delete_submission(submission_id)
    raise_for_outcome(result, resource_id=submission_id)
    return result.message


@router.post("/delete-melding", response_class=PlainTextResponse)
async def delete_melding(
    request: Request,
    service: DeletionServiceDep,
    verifier: CredentialVerifierDep,
) -> str:
    """Delete a submission on behalf of a vendor.

    The body is a JSON(-LD) envelope carrying the vendor credentials and
    the submission URI. The vendor must be entitled to act for the
    organization that owns the submission.
    """
    content_type = request.headers.get("content-type")
    if not is_supported_content_type(content_type):
        raise ValidationError(
            "content-type",
            "Content type must be application/json or application/ld+json",
            content_type=content_type or "",
        )

    try:
        envelope = DeleteRequestEnvelope.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise ValidationError("body", f"Request body is not valid JSON: {err}") from err
    except PydanticValidationError as err:
        reason = f"Malformed delete request: {err.error_count()} errors"
        raise ValidationError("body", reason) from err

    authentication = envelope.authentication()
    if authentication is None:
        raise AuthorizationError(
            "Authentication block is incomplete; publisher uri, key and organization are required",
            context={"request_id": envelope.request_id},
        )

    organization_id = await verifier.verify(authentication)
    if organization_id is None:
        raise AuthorizationError(
            "Vendor is not allowed to act on behalf of the organization",
            context={
                "vendor": authentication.vendor,
                "organization": authentication.organization,
            },
        )

    if not envelope.subject:
        raise ValidationError("subject", "There was no submission URI in the request")

    logger.info(
        "delete_request_accepted",
        extra={
            "request_id": envelope.request_id,
            "vendor": authentication.vendor,
            "submission_uri": envelope.subject,
        },
    )
    result = await service.delete_submission_by_uri(
        envelope.subject,
        organization_id=organization_id,
    )
    raise_for_outcome(result, resource_id=envelope.subject)
    return result.message
