"""
Sort key providers — the capability the orchestrator depends on.

Two interchangeable implementations exist (Base64, PaddedNumeric). They share
no base class; anything with `key_between` and `spread_keys` qualifies.
"""

from typing import Callable, Dict, List, Optional, Protocol

from reorder_kernel.models.keyspace import KeyspaceConfig, KeyspaceKind
from reorder_kernel.sort_keys.base64_keys import Base64Keyspace
from reorder_kernel.sort_keys.padded_numeric import PaddedNumericKeyspace


class SortKeyProvider(Protocol):

    def key_between(self, lower: Optional[str], upper: Optional[str]) -> str:
        """A key strictly between `lower` and `upper` (None = unbounded)."""
        ...

    def spread_keys(self, count: int) -> List[str]:
        """`count` ascending, evenly spaced keys for a full renumber."""
        ...


# Registry — maps keyspace kinds to provider factories
_PROVIDER_FACTORIES: Dict[KeyspaceKind, Callable[[KeyspaceConfig], SortKeyProvider]] = {
    KeyspaceKind.BASE64: lambda config: Base64Keyspace(jitter=config.jitter),
    KeyspaceKind.PADDED_NUMERIC: lambda config: PaddedNumericKeyspace(
        width=config.width, edge_step=config.edge_step
    ),
}


def build_provider(config: Optional[KeyspaceConfig] = None) -> SortKeyProvider:
    """Create the provider a collection's keyspace config selects."""
    config = config or KeyspaceConfig()
    return _PROVIDER_FACTORIES[config.kind](config)
