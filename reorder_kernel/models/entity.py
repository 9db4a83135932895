"""Sortable entities and the collections that hold them."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from reorder_kernel.models.keyspace import KeyspaceConfig


class SortableEntity(BaseModel):
    """
    An entity with an explicit display position.

    The kernel only reads `id` and `sort_key`; `version` and `properties`
    belong to the persistence collaborator.
    """

    id: str
    sort_key: str                           # Opaque, ascending = display order
    version: int = Field(ge=1, default=1)   # Optimistic concurrency counter
    properties: dict = {}


class OrderedCollection(BaseModel):
    """A named collection whose members share one keyspace."""

    id: str
    keyspace: KeyspaceConfig = KeyspaceConfig()
    created_at: datetime
    entity_count: Optional[int] = None
