"""Submission Clean-up Domain Submissions Infrastructure — credential and alert adapters."""

from submission_cleanup.domain.submissions.infrastructure.credentials import (
    VendorCredentialVerifier,
)
from submission_cleanup.domain.submissions.infrastructure.error_alerts import (
    ErrorAlertReporter,
)

__all__ = [
    "ErrorAlertReporter",
    "VendorCredentialVerifier",
]
