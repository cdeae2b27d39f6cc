"""Entry point loading for the app factory."""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import Any, NamedTuple

logger = logging.getLogger(__name__)


class Discovered(NamedTuple):
    """A loaded entry point: its name and the object it points at."""

    name: str
    value: Any


def discover(group: str, *, exclude_names: frozenset[str] = frozenset()) -> list[Discovered]:
    """Load every entry point of ``group``, ordered by name.

    A broken entry point is logged and left out, so one faulty plugin does
    not keep the service from starting.
    """
    found: list[Discovered] = []
    for ep in sorted(entry_points(group=group), key=lambda ep: ep.name):
        if ep.name in exclude_names:
            logger.debug("entry_point_excluded", extra={"group": group, "entry_point": ep.name})
            continue
        try:
            found.append(Discovered(ep.name, ep.load()))
        except Exception:
            logger.exception(
                "entry_point_load_failed", extra={"group": group, "entry_point": ep.name}
            )
    logger.info("entry_points_discovered", extra={"group": group, "count": len(found)})
    return found
