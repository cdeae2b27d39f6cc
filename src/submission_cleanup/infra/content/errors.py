"""Content store error types."""

from __future__ import annotations


class ContentStoreError(Exception):
    """Raised when physical content exists but could not be removed.

    Attributes:
        location: The location reference that failed.
    """

    def __init__(self, message: str, *, location: str) -> None:
        super().__init__(message)
        self.location = location


class UnsupportedLocationError(ContentStoreError):
    """Raised when a location reference does not belong to this store."""
