"""
Base64 keyspace — unbounded lexicographic sort keys.

A key is read as a base-64 fraction 0.d1 d2 ... dn over an alphabet laid out
in ASCII order, so plain string comparison (and binary SQL collation) gives
the numeric order. Valid keys never end in the zero digit; under that rule
two keys compare lexicographically exactly as their fractions compare, and
a key strictly between any two distinct keys always exists.

Example:
    key_between(None, None)   -> "V"
    key_between("V", None)    -> "k"
    key_between("V", "W")     -> "VV"
"""

import logging
import random
from typing import Dict, List, Optional

from reorder_kernel.errors import ReorderValidationError

logger = logging.getLogger(__name__)

ALPHABET = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
BASE = len(ALPHABET)
ZERO_DIGIT = ALPHABET[0]

_DIGIT_VALUES: Dict[str, int] = {ch: i for i, ch in enumerate(ALPHABET)}


def is_valid_key(key: str) -> bool:
    """Non-empty, alphabet-only and not ending in the zero digit."""
    if not isinstance(key, str) or not key:
        return False
    if key[-1] == ZERO_DIGIT:
        return False
    return all(ch in _DIGIT_VALUES for ch in key)


def _check_key(key: str, role: str) -> None:
    if not is_valid_key(key):
        raise ReorderValidationError(f"invalid base64 sort key for {role}: {key!r}")


def _to_int(key: str, length: int) -> int:
    """The key's digits, right-padded with zeros to `length`, as an integer."""
    value = 0
    for ch in key.ljust(length, ZERO_DIGIT):
        value = value * BASE + _DIGIT_VALUES[ch]
    return value


def _to_key(value: int, length: int) -> str:
    """Inverse of `_to_int`, with trailing zero digits stripped."""
    digits = []
    for _ in range(length):
        value, digit = divmod(value, BASE)
        digits.append(ALPHABET[digit])
    return "".join(reversed(digits)).rstrip(ZERO_DIGIT)


class Base64Keyspace:
    """
    Midpoint key generator. Never reports exhaustion: when two bounds have
    no gap at the current length, both are extended by one digit.

    With `jitter` enabled the midpoint is drawn from the middle half of the
    gap instead of its exact centre, which spreads repeated inserts at the
    same boundary.
    """

    def __init__(self, jitter: bool = False, rng: Optional[random.Random] = None):
        self.jitter = jitter
        self._rng = rng or random.Random()

    def key_between(self, lower: Optional[str], upper: Optional[str]) -> str:
        if lower is not None:
            _check_key(lower, "lower bound")
        if upper is not None:
            _check_key(upper, "upper bound")
        if lower is not None and upper is not None and lower >= upper:
            raise ReorderValidationError(
                f"lower bound {lower!r} must sort before upper bound {upper!r}"
            )

        length = max(len(lower or ""), len(upper or ""), 1)
        low = _to_int(lower, length) if lower is not None else 0
        high = _to_int(upper, length) if upper is not None else BASE ** length

        while high - low < 2:
            length += 1
            low *= BASE
            high *= BASE
            logger.debug(
                "extended base64 keyspace to %d digits between %r and %r",
                length, lower, upper,
            )

        return _to_key(self._pick(low, high), length)

    def spread_keys(self, count: int) -> List[str]:
        """`count` ascending keys spaced evenly over (0, 1)."""
        if count <= 0:
            return []
        length = 1
        while BASE ** length < 2 * (count + 1):
            length += 1
        step = BASE ** length // (count + 1)
        return [_to_key(step * i, length) for i in range(1, count + 1)]

    def _pick(self, low: int, high: int) -> int:
        span = high - low
        middle = low + span // 2
        if self.jitter and span >= 4:
            quarter = span // 4
            middle += self._rng.randint(-quarter, quarter)
        return middle
