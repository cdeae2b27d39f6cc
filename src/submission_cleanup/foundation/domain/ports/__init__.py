"""Domain port interfaces for hexagonal architecture.

Ports define abstract interfaces that the domain layer uses to interact
with external stores. Implementations (adapters) live in infrastructure.
"""

from submission_cleanup.foundation.domain.ports.content_store import ContentStorePort
from submission_cleanup.foundation.domain.ports.graph_store import GraphStorePort

__all__ = ["ContentStorePort", "GraphStorePort"]
