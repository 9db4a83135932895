"""Reorder Kernel data models."""

from reorder_kernel.models.entity import OrderedCollection, SortableEntity
from reorder_kernel.models.keyspace import KeyspaceConfig, KeyspaceKind
from reorder_kernel.models.reorder import (
    BisectionResult,
    NeighborDescriptor,
    ReorderOutcome,
    ReorderRequest,
)

__all__ = [
    "BisectionResult",
    "KeyspaceConfig",
    "KeyspaceKind",
    "NeighborDescriptor",
    "OrderedCollection",
    "ReorderOutcome",
    "ReorderRequest",
    "SortableEntity",
]
