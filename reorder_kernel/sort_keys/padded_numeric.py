"""
PaddedNumeric keyspace — bounded, fixed-width integer sort keys.

Keys are zero-padded decimal strings of `width` digits, so string order and
integer order agree. Between two keys the new key is their integer average.
Past the first or last key it sits `edge_step` away from that key, capped at
the midpoint toward the edge of the range, so appends and prepends use up
headroom linearly instead of halving it.

Once two neighbors are consecutive integers the gap is exhausted and the
collection has to be renumbered (see `spread_keys`) before the move can be
retried.
"""

import logging
from typing import List, Optional, Union

from reorder_kernel.errors import KeyspaceExhaustedError, ReorderValidationError

logger = logging.getLogger(__name__)

NumericKey = Union[int, str]

# Default edge step as a fraction of the range: room for ~1024 appends
EDGE_STEP_DIVISOR = 1024


class PaddedNumericKeyspace:
    """Keys in [0, 10**width - 1], formatted to exactly `width` digits."""

    def __init__(self, width: int = 10, edge_step: Optional[int] = None):
        if width < 1:
            raise ReorderValidationError(f"keyspace width must be positive, got {width}")
        if edge_step is not None and edge_step < 1:
            raise ReorderValidationError(f"edge step must be positive, got {edge_step}")
        self.width = width
        self.max_value = 10 ** width - 1
        self.edge_step = edge_step or max(1, (self.max_value + 1) // EDGE_STEP_DIVISOR)

    def format(self, value: int) -> str:
        return f"{value:0{self.width}d}"

    def parse(self, key: NumericKey) -> int:
        """Integer value of `key`, which may be an int or a padded string."""
        if isinstance(key, bool):
            raise ReorderValidationError(f"invalid numeric sort key: {key!r}")
        if isinstance(key, int):
            value = key
        elif (
            isinstance(key, str)
            and len(key) == self.width
            and key.isascii()
            and key.isdigit()
        ):
            value = int(key)
        else:
            raise ReorderValidationError(
                f"invalid numeric sort key: {key!r} (expected {self.width} digits)"
            )
        if not 0 <= value <= self.max_value:
            raise ReorderValidationError(
                f"numeric sort key {value} outside [0, {self.max_value}]"
            )
        return value

    def key_between(
        self, lower: Optional[NumericKey], upper: Optional[NumericKey]
    ) -> str:
        low = self.parse(lower) if lower is not None else -1
        high = self.parse(upper) if upper is not None else self.max_value + 1

        if lower is not None and upper is not None and low >= high:
            raise ReorderValidationError(
                f"lower bound {lower!r} must sort before upper bound {upper!r}"
            )
        if high - low <= 1:
            logger.warning(
                "numeric keyspace exhausted between %r and %r", lower, upper
            )
            raise KeyspaceExhaustedError(
                f"no {self.width}-digit key exists between {lower!r} and {upper!r}; "
                f"the collection must be renumbered"
            )

        middle = (low + high) // 2
        if lower is not None and upper is None:
            return self.format(min(low + self.edge_step, middle))
        if lower is None and upper is not None:
            return self.format(max(high - self.edge_step, middle))
        return self.format(middle)

    def spread_keys(self, count: int) -> List[str]:
        """`count` ascending keys spaced evenly across the whole range."""
        if count <= 0:
            return []
        step = (self.max_value + 1) // (count + 1)
        if step < 1:
            raise KeyspaceExhaustedError(
                f"{count} keys do not fit in a {self.width}-digit keyspace"
            )
        return [self.format(step * i) for i in range(1, count + 1)]
