"""
Reorder Orchestrator — composes the kernel into one reorder operation.

Pipeline:
  NeighborResolver.resolve -> Bisector.bisect -> provider.key_between -> commit

Behavioral Contract:
- Exactly one key is written per successful reorder: the target's
- Every failure before `commit` aborts the operation with nothing written
- `commit` is the persistence collaborator's; its exceptions propagate
  unmodified and a falsy return is reported as `committed=False`
- No retries, no rebalancing; an exhausted keyspace is reported to the caller
- The snapshot must not change between resolve and commit; serializing
  concurrent reorders is the collaborator's job
"""

import logging
from typing import Callable, Optional, Sequence

from reorder_kernel.bisection.bisector import Bisector
from reorder_kernel.models.entity import SortableEntity
from reorder_kernel.models.reorder import ReorderOutcome, ReorderRequest
from reorder_kernel.neighbors.resolver import NeighborResolver
from reorder_kernel.sort_keys.provider import SortKeyProvider

logger = logging.getLogger(__name__)

CommitFn = Callable[[str, str], bool]


class ReorderOrchestrator:

    def __init__(
        self,
        resolver: Optional[NeighborResolver] = None,
        bisector: Optional[Bisector] = None,
    ):
        self.resolver = resolver or NeighborResolver()
        self.bisector = bisector or Bisector()

    def reorder(
        self,
        entities: Sequence[SortableEntity],
        request: ReorderRequest,
        provider: SortKeyProvider,
        commit: CommitFn,
    ) -> ReorderOutcome:
        """
        Move `request.target_id` into the gap its neighbors describe.

        `entities` must be ascending by sort key and is never modified.
        """
        snapshot = tuple(entities)

        neighbors = self.resolver.resolve(snapshot, request)
        bisection = self.bisector.bisect(snapshot, neighbors)
        lower_key = bisection.lower_key
        upper_key = bisection.upper_key
        new_key = provider.key_between(lower_key, upper_key)

        target = bisection.target
        logger.debug(
            "reorder %s: index %d, key %r -> %r (between %r and %r)",
            target.id, bisection.target_index, target.sort_key,
            new_key, lower_key, upper_key,
        )

        committed = bool(commit(target.id, new_key))
        if committed:
            logger.info("reordered %s to index %d", target.id, bisection.target_index)
        else:
            logger.warning("commit of new sort key for %s was not applied", target.id)

        return ReorderOutcome(
            target_id=target.id,
            previous_key=target.sort_key,
            new_key=new_key,
            target_index=bisection.target_index,
            lower_key=lower_key,
            upper_key=upper_key,
            committed=committed,
        )
