"""Keyspace configuration — which sort key scheme a collection uses."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class KeyspaceKind(str, Enum):
    BASE64 = "base64"                       # Unbounded, never exhausts
    PADDED_NUMERIC = "padded_numeric"       # Fixed-width integers, may exhaust


class KeyspaceConfig(BaseModel):
    """
    Chosen once per collection. Switching kinds for a populated collection
    means rewriting every stored key.
    """

    kind: KeyspaceKind = KeyspaceKind.BASE64
    width: int = Field(ge=1, le=18, default=10)     # PADDED_NUMERIC digits
    edge_step: Optional[int] = Field(ge=1, default=None)  # PADDED_NUMERIC append/prepend gap
    jitter: bool = False                            # BASE64 midpoint jitter
