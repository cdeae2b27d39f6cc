"""Submission Clean-up Infra Content — physical file content adapters."""

from submission_cleanup.infra.content.errors import (
    ContentStoreError,
    UnsupportedLocationError,
)
from submission_cleanup.infra.content.memory import InMemoryContentStore
from submission_cleanup.infra.content.share_volume import (
    SHARE_SCHEME,
    ShareVolumeContentStore,
)

__all__ = [
    "SHARE_SCHEME",
    "ContentStoreError",
    "InMemoryContentStore",
    "ShareVolumeContentStore",
    "UnsupportedLocationError",
]
