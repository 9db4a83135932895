"""
Bisector — splits the remaining entities around the target's new position.

Runs after the Neighbor Resolver, so the descriptor is already validated.
The split never reorders the remaining entities.
"""

from typing import Sequence

from reorder_kernel.errors import NotFoundError
from reorder_kernel.models.entity import SortableEntity
from reorder_kernel.models.reorder import BisectionResult, NeighborDescriptor
from reorder_kernel.neighbors.resolver import (
    exclude_position,
    index_of,
    locate_target,
)


class Bisector:
    """Computes where the target lands and which keys bound it."""

    def bisect(
        self,
        entities: Sequence[SortableEntity],
        neighbors: NeighborDescriptor,
    ) -> BisectionResult:
        target = neighbors.target
        remainder = exclude_position(
            entities, locate_target(entities, target.id)
        )

        if neighbors.to_first:
            return BisectionResult(
                target=target,
                target_index=0,
                befores=[],
                afters=remainder,
            )

        after_index = index_of(remainder, neighbors.after.id)
        if after_index is None:
            raise NotFoundError(
                f"reorder operation cannot locate "
                f"{{ after_id: {neighbors.after.id!r} }} for bisection"
            )

        # the target goes immediately after its { after } neighbor
        target_index = after_index + 1
        return BisectionResult(
            target=target,
            target_index=target_index,
            befores=remainder[:target_index],
            afters=remainder[target_index:],
        )
