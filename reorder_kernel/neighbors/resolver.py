"""
Neighbor Resolver — first stage of every reorder.

Validates a ReorderRequest against the current collection snapshot and
produces a canonical NeighborDescriptor.

Behavioral Contract:
- Malformed directive combinations are rejected before any lookup
- The target, and any named neighbor, must exist in the snapshot
- Neighbors are looked up among the entities *other than* the target
- Declared neighbors must already be adjacent (or at the claimed boundary);
  there is no "closest valid position" fallback
- Never mutates the caller's sequence
"""

from typing import List, Optional, Sequence

from reorder_kernel.errors import NotFoundError, ReorderValidationError
from reorder_kernel.models.entity import SortableEntity
from reorder_kernel.models.reorder import NeighborDescriptor, ReorderRequest


def index_of(entities: Sequence[SortableEntity], entity_id: str) -> Optional[int]:
    """Position of the entity with `entity_id`, or None."""
    for index, entity in enumerate(entities):
        if entity.id == entity_id:
            return index
    return None


def exclude_position(
    entities: Sequence[SortableEntity], position: int
) -> List[SortableEntity]:
    """Copy of `entities` without the element at `position`, order preserved."""
    return [e for i, e in enumerate(entities) if i != position]


def locate_target(
    entities: Sequence[SortableEntity], target_id: str
) -> int:
    target_index = index_of(entities, target_id)
    if target_index is None:
        raise NotFoundError(
            f"reorder operation cannot locate {{ target_id: {target_id!r} }}"
        )
    return target_index


class NeighborResolver:
    """
    Stateless; one instance can serve any number of collections.
    """

    def resolve(
        self,
        entities: Sequence[SortableEntity],
        request: ReorderRequest,
    ) -> NeighborDescriptor:
        """
        Validate `request` against `entities` (ascending by sort key).

        Given [A, B, C] and { target_id: B, after_id: A, before_id: C },
        the remainder is [A, C]; A and C are adjacent there, so B may be
        placed between them.
        """
        request.check_directives()

        target_index = locate_target(entities, request.target_id)
        target = entities[target_index]
        remainder = exclude_position(entities, target_index)

        before_index = None
        if not request.to_last:
            before_index = index_of(remainder, request.before_id)
            if before_index is None:
                raise NotFoundError(
                    f"reorder operation cannot locate "
                    f"{{ before_id: {request.before_id!r} }}"
                )

        after_index = None
        if not request.to_first:
            after_index = index_of(remainder, request.after_id)
            if after_index is None:
                raise NotFoundError(
                    f"reorder operation cannot locate "
                    f"{{ after_id: {request.after_id!r} }}"
                )

        self._check_adjacency(remainder, request, before_index, after_index)

        before = remainder[before_index] if before_index is not None else None
        after = remainder[after_index] if after_index is not None else None
        return NeighborDescriptor(
            request=request,
            target=target,
            before=before,
            after=after,
            to_first=after is None,
            to_last=before is None,
        )

    def _check_adjacency(
        self,
        remainder: List[SortableEntity],
        request: ReorderRequest,
        before_index: Optional[int],
        after_index: Optional[int],
    ) -> None:
        """The declared neighbors must bound a gap that exists right now."""
        if before_index is None:
            if after_index is None:
                # first-and-last at once is only possible for a lone target
                if remainder:
                    raise ReorderValidationError(
                        "reorder operation cannot reorder to first-and-last "
                        "unless the collection only contains the target"
                    )
            elif after_index != len(remainder) - 1:
                raise ReorderValidationError(
                    f"reorder operation expected "
                    f"{{ after_id: {request.after_id!r} }} to be the last entity"
                )
            return

        if after_index is None:
            if before_index != 0:
                raise ReorderValidationError(
                    f"reorder operation expected "
                    f"{{ before_id: {request.before_id!r} }} to be the first entity"
                )
            return

        if after_index != before_index - 1:
            raise ReorderValidationError(
                f"reorder operation expected "
                f"{{ before_id: {request.before_id!r}, "
                f"after_id: {request.after_id!r} }} to be adjacent"
            )
