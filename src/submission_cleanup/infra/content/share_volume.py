"""Content store backed by the shared file volume.

Physical files of the mu-semtech file service are addressed as
``share://<relative path>`` and live below a mounted directory
(``/share`` by default). Unlinking runs in a worker thread to keep the
event loop free.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from submission_cleanup.infra.content.errors import (
    ContentStoreError,
    UnsupportedLocationError,
)

logger = logging.getLogger(__name__)

SHARE_SCHEME = "share://"


class ShareVolumeContentStore:
    """Deletes ``share://`` locations from a mounted directory.

    Args:
        root: Mount point of the share volume.

    Example:
        >>> store = ShareVolumeContentStore(Path("/share"))
        >>> store.path_for("share://submissions/abc.ttl")
        PosixPath('/share/submissions/abc.ttl')
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        """Resolved mount point."""
        return self._root

    def path_for(self, location: str) -> Path:
        """Map a ``share://`` location to a path inside the mount point.

        Raises:
            UnsupportedLocationError: If the scheme is not ``share://`` or the
                path escapes the mount point.
        """
        if not location.startswith(SHARE_SCHEME):
            raise UnsupportedLocationError(
                f"Not a share location: {location}",
                location=location,
            )
        relative = location[len(SHARE_SCHEME) :].lstrip("/")
        path = (self._root / relative).resolve()
        if path == self._root or self._root not in path.parents:
            raise UnsupportedLocationError(
                f"Share location resolves outside {self._root}: {location}",
                location=location,
            )
        return path

    async def delete(self, location: str) -> None:
        path = self.path_for(location)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            logger.warning(
                "content_already_absent",
                extra={"location": location, "path": str(path)},
            )
            return
        except OSError as err:
            logger.error(
                "content_delete_failed",
                extra={"location": location, "path": str(path), "error": str(err)},
            )
            raise ContentStoreError(
                f"Failed to delete {location} on disk: {err}",
                location=location,
            ) from err
        logger.info("content_deleted", extra={"location": location})
