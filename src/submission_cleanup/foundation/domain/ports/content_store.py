"""Port interface for the physical content store."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ContentStorePort(Protocol):
    """Port for deleting physical file content by location reference.

    ``delete`` must only return once the bytes are gone. Callers rely on
    that to delete the describing statements afterwards. Content that is
    already absent counts as deleted.
    """

    async def delete(self, location: str) -> None:
        """Delete the content stored at ``location`` (e.g. ``share://a/b.ttl``).

        Raises:
            ContentStoreError: If the content exists but could not be removed.
        """
        ...
