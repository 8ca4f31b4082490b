"""
Block selectors and transaction wait levels used in RPC params.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, Union

from .hash import CryptoHash


class Finality(str, Enum):
    """Confidence level at which state is read."""

    OPTIMISTIC = "optimistic"
    NEAR_FINAL = "near-final"
    FINAL = "final"


class TxExecutionStatus(str, Enum):
    """How long ``send_tx`` waits before answering."""

    NONE = "NONE"
    INCLUDED = "INCLUDED"
    EXECUTED_OPTIMISTIC = "EXECUTED_OPTIMISTIC"
    INCLUDED_FINAL = "INCLUDED_FINAL"
    EXECUTED = "EXECUTED"
    FINAL = "FINAL"


class BlockReference:
    """
    Selects the block a query runs against: a finality level, a height or
    a block hash.
    """

    __slots__ = ("finality", "height", "hash")

    def __init__(self, finality: Finality = None, height: int = None, hash: CryptoHash = None):
        if sum(x is not None for x in (finality, height, hash)) != 1:
            raise ValueError("BlockReference needs exactly one of finality, height or hash")
        self.finality = Finality(finality) if finality is not None else None
        self.height = height
        self.hash = CryptoHash.coerce(hash) if hash is not None else None

    @classmethod
    def optimistic(cls) -> BlockReference:
        return cls(finality=Finality.OPTIMISTIC)

    @classmethod
    def final(cls) -> BlockReference:
        return cls(finality=Finality.FINAL)

    @classmethod
    def coerce(cls, value: Union[None, Finality, int, str, CryptoHash, BlockReference]) -> BlockReference:
        """Accept a finality, a height, a block hash, or None (optimistic)."""
        if value is None:
            return cls.optimistic()
        if isinstance(value, BlockReference):
            return value
        if isinstance(value, Finality):
            return cls(finality=value)
        if isinstance(value, bool):
            raise TypeError("Block reference cannot be a bool")
        if isinstance(value, int):
            return cls(height=value)
        if isinstance(value, str) and value in {f.value for f in Finality}:
            return cls(finality=Finality(value))
        return cls(hash=value)

    def to_rpc_params(self) -> Dict[str, Any]:
        if self.finality is not None:
            return {"finality": self.finality.value}
        if self.height is not None:
            return {"block_id": self.height}
        return {"block_id": str(self.hash)}

    def __eq__(self, other) -> bool:
        return isinstance(other, BlockReference) and self.to_rpc_params() == other.to_rpc_params()

    def __repr__(self) -> str:
        return f"BlockReference({self.to_rpc_params()})"
