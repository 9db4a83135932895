"""Tests for the Neighbor Resolver."""

import pytest

from reorder_kernel.errors import NotFoundError, ReorderValidationError
from reorder_kernel.models.entity import SortableEntity
from reorder_kernel.models.reorder import ReorderRequest
from reorder_kernel.neighbors.resolver import (
    NeighborResolver,
    exclude_position,
    index_of,
)


def _make_entities(*pairs) -> list:
    return [SortableEntity(id=entity_id, sort_key=key) for entity_id, key in pairs]


def _abc() -> list:
    return _make_entities(("A", "0000000010"), ("B", "0000000020"), ("C", "0000000030"))


class TestHelpers:
    def test_index_of(self):
        entities = _abc()
        assert index_of(entities, "C") == 2
        assert index_of(entities, "Z") is None

    def test_exclude_position_keeps_order_and_input(self):
        entities = _abc()
        remainder = exclude_position(entities, 1)
        assert [e.id for e in remainder] == ["A", "C"]
        assert [e.id for e in entities] == ["A", "B", "C"]

    def test_exclude_position_with_equal_values(self):
        """Removal is positional, so value-equal entities are not affected."""
        twin = SortableEntity(id="A", sort_key="1")
        entities = [twin, SortableEntity(id="A", sort_key="1")]
        assert len(exclude_position(entities, 0)) == 1


class TestNeighborResolver:
    def test_between_adjacent_neighbors(self):
        entities = _abc()
        request = ReorderRequest(target_id="B", after_id="A", before_id="C")
        neighbors = NeighborResolver().resolve(entities, request)

        assert neighbors.target.id == "B"
        assert neighbors.after.id == "A"
        assert neighbors.before.id == "C"
        assert neighbors.to_first is False
        assert neighbors.to_last is False

    def test_to_first(self):
        request = ReorderRequest(target_id="A", to_first=True, before_id="B")
        neighbors = NeighborResolver().resolve(_abc(), request)
        assert neighbors.after is None
        assert neighbors.before.id == "B"
        assert neighbors.to_first is True

    def test_to_first_from_the_middle(self):
        request = ReorderRequest(target_id="B", to_first=True, before_id="A")
        neighbors = NeighborResolver().resolve(_abc(), request)
        assert neighbors.before.id == "A"
        assert neighbors.to_first is True

    def test_to_last(self):
        request = ReorderRequest(target_id="A", after_id="C", to_last=True)
        neighbors = NeighborResolver().resolve(_abc(), request)
        assert neighbors.before is None
        assert neighbors.after.id == "C"
        assert neighbors.to_last is True

    def test_singleton_to_first_and_last(self):
        entities = _make_entities(("A", "V"))
        request = ReorderRequest(target_id="A", to_first=True, to_last=True)
        neighbors = NeighborResolver().resolve(entities, request)
        assert neighbors.to_first is True
        assert neighbors.to_last is True

    def test_first_and_last_rejected_with_others(self):
        request = ReorderRequest(target_id="A", to_first=True, to_last=True)
        with pytest.raises(ReorderValidationError, match="first-and-last"):
            NeighborResolver().resolve(_abc(), request)

    def test_missing_target(self):
        request = ReorderRequest(target_id="Z", after_id="A", before_id="B")
        with pytest.raises(NotFoundError, match="target_id"):
            NeighborResolver().resolve(_abc(), request)

    def test_missing_before(self):
        request = ReorderRequest(target_id="A", to_first=True, before_id="Z")
        with pytest.raises(NotFoundError, match="before_id"):
            NeighborResolver().resolve(_abc(), request)

    def test_missing_after(self):
        request = ReorderRequest(target_id="A", after_id="Z", to_last=True)
        with pytest.raises(NotFoundError, match="after_id"):
            NeighborResolver().resolve(_abc(), request)

    def test_target_cannot_be_its_own_neighbor(self):
        request = ReorderRequest(target_id="B", after_id="B", before_id="C")
        with pytest.raises(NotFoundError):
            NeighborResolver().resolve(_abc(), request)

    def test_conflicting_directives_rejected_before_lookup(self):
        request = ReorderRequest(target_id="Z", after_id="C", to_first=True, before_id="B")
        with pytest.raises(ReorderValidationError):
            NeighborResolver().resolve(_abc(), request)

    def test_neighbors_not_adjacent(self):
        entities = _make_entities(("A", "1"), ("B", "2"), ("C", "3"), ("D", "4"))
        request = ReorderRequest(target_id="D", after_id="A", before_id="C")
        with pytest.raises(ReorderValidationError, match="adjacent"):
            NeighborResolver().resolve(entities, request)

    def test_neighbors_reversed(self):
        request = ReorderRequest(target_id="B", after_id="C", before_id="A")
        with pytest.raises(ReorderValidationError, match="adjacent"):
            NeighborResolver().resolve(_abc(), request)

    def test_to_first_requires_first_before(self):
        request = ReorderRequest(target_id="A", to_first=True, before_id="C")
        with pytest.raises(ReorderValidationError, match="first entity"):
            NeighborResolver().resolve(_abc(), request)

    def test_to_last_requires_last_after(self):
        request = ReorderRequest(target_id="C", after_id="A", to_last=True)
        with pytest.raises(ReorderValidationError, match="last entity"):
            NeighborResolver().resolve(_abc(), request)

    def test_resolution_is_idempotent(self):
        entities = _abc()
        request = ReorderRequest(target_id="B", after_id="A", before_id="C")
        resolver = NeighborResolver()
        assert resolver.resolve(entities, request) == resolver.resolve(entities, request)

    def test_snapshot_is_not_mutated(self):
        entities = _abc()
        before = [e.model_copy() for e in entities]
        request = ReorderRequest(target_id="C", to_first=True, before_id="A")
        NeighborResolver().resolve(entities, request)
        assert entities == before
