"""In-memory implementation of :class:`ContentStorePort` for tests and local runs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from submission_cleanup.infra.content.errors import ContentStoreError

if TYPE_CHECKING:
    from collections.abc import Iterable


class InMemoryContentStore:
    """Keeps content keyed by location.

    Args:
        locations: Locations that initially hold content.
        journal: Optional shared list receiving ``("content.delete", location)``
            entries, in call order.
        failing: Locations whose deletion raises :class:`ContentStoreError`.
    """

    def __init__(
        self,
        locations: Iterable[str] = (),
        *,
        journal: list[tuple[Any, ...]] | None = None,
        failing: Iterable[str] = (),
    ) -> None:
        self._content: dict[str, bytes] = {loc: b"" for loc in locations}
        self._failing = set(failing)
        self.journal: list[tuple[Any, ...]] = journal if journal is not None else []

    def put(self, location: str, data: bytes = b"") -> None:
        """Store content at ``location``."""
        self._content[location] = data

    def __contains__(self, location: object) -> bool:
        return location in self._content

    @property
    def locations(self) -> set[str]:
        """Locations currently holding content."""
        return set(self._content)

    async def delete(self, location: str) -> None:
        if location in self._failing:
            raise ContentStoreError(f"Simulated failure deleting {location}", location=location)
        self._content.pop(location, None)
        self.journal.append(("content.delete", location))
