"""Reorder request and the transient values derived from it."""

from typing import List, Optional

from pydantic import BaseModel, Field

from reorder_kernel.errors import ReorderValidationError
from reorder_kernel.models.entity import SortableEntity


class ReorderRequest(BaseModel):
    """
    Move `target_id` into the gap between two neighbors.

    Exactly one of `before_id` / `to_last` and exactly one of
    `after_id` / `to_first` must be given.
    """

    target_id: str
    before_id: Optional[str] = None         # Entity that will follow the target
    to_last: bool = False
    after_id: Optional[str] = None          # Entity that will precede the target
    to_first: bool = False

    def check_directives(self) -> None:
        """
        Reject malformed directive combinations before any lookup.
        Conflicts are reported ahead of missing directives.
        """
        if self.before_id is not None and self.to_last:
            raise ReorderValidationError(
                f"reorder operation cannot specify both "
                f"{{ before_id: {self.before_id!r}, to_last: true }}"
            )
        if self.after_id is not None and self.to_first:
            raise ReorderValidationError(
                f"reorder operation cannot specify both "
                f"{{ after_id: {self.after_id!r}, to_first: true }}"
            )
        if self.before_id is None and not self.to_last:
            raise ReorderValidationError(
                "reorder operation requires one of { before_id, to_last }"
            )
        if self.after_id is None and not self.to_first:
            raise ReorderValidationError(
                "reorder operation requires one of { after_id, to_first }"
            )


class NeighborDescriptor(BaseModel):
    """
    Canonical, validated neighbors of a move.

    `before is None` means the target becomes last,
    `after is None` means the target becomes first.
    """

    request: ReorderRequest
    target: SortableEntity
    before: Optional[SortableEntity] = None
    after: Optional[SortableEntity] = None
    to_first: bool
    to_last: bool


class BisectionResult(BaseModel):
    """The remaining entities split around the target's new position."""

    target: SortableEntity
    target_index: int = Field(ge=0)
    befores: List[SortableEntity]           # Includes `after` as its last element
    afters: List[SortableEntity]            # Starts with `before`

    @property
    def lower_key(self) -> Optional[str]:
        return self.befores[-1].sort_key if self.befores else None

    @property
    def upper_key(self) -> Optional[str]:
        return self.afters[0].sort_key if self.afters else None


class ReorderOutcome(BaseModel):
    """Result of one reorder: the single key change and whether it was stored."""

    target_id: str
    previous_key: str
    new_key: str
    target_index: int
    lower_key: Optional[str] = None
    upper_key: Optional[str] = None
    committed: bool
