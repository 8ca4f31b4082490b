"""
RPC response models.

Only the fields this client reads are declared; everything else the node
sends is ignored. Large integers arrive as decimal strings and are coerced
to ``int``.
"""

from __future__ import annotations
import base64
import json
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .hash import CryptoHash
from .block_reference import TxExecutionStatus

_MODEL_CONFIG = {"populate_by_name": True, "extra": "ignore"}


class AccountView(BaseModel):
    amount: int
    locked: int = 0
    code_hash: str
    storage_usage: int
    storage_paid_at: int = 0
    block_height: int
    block_hash: str

    model_config = _MODEL_CONFIG


class AccessKeyView(BaseModel):
    """Access key as seen by ``view_access_key``."""

    nonce: int
    permission: Union[str, Dict[str, Any]]
    block_height: int = 0
    block_hash: Optional[str] = None

    model_config = _MODEL_CONFIG

    @property
    def is_full_access(self) -> bool:
        return self.permission == "FullAccess"


class AccessKeyInfoView(BaseModel):
    public_key: str
    access_key: AccessKeyView

    model_config = _MODEL_CONFIG


class AccessKeyListView(BaseModel):
    keys: List[AccessKeyInfoView] = Field(default_factory=list)
    block_height: int = 0
    block_hash: Optional[str] = None

    model_config = _MODEL_CONFIG


class ViewFunctionResult(BaseModel):
    result: List[int] = Field(default_factory=list)
    logs: List[str] = Field(default_factory=list)
    block_height: int = 0
    block_hash: Optional[str] = None

    model_config = _MODEL_CONFIG

    @property
    def raw(self) -> bytes:
        return bytes(self.result)

    def as_json(self) -> Any:
        """Decode the returned bytes as JSON."""
        return json.loads(self.raw.decode("utf-8"))


class BlockHeaderView(BaseModel):
    height: int
    hash: str
    prev_hash: Optional[str] = None
    timestamp: int = 0
    epoch_id: Optional[str] = None

    model_config = _MODEL_CONFIG

    @property
    def block_hash(self) -> CryptoHash:
        return CryptoHash.from_string(self.hash)


class BlockView(BaseModel):
    author: Optional[str] = None
    header: BlockHeaderView
    chunks: List[Dict[str, Any]] = Field(default_factory=list)

    model_config = _MODEL_CONFIG


class SyncInfo(BaseModel):
    latest_block_hash: str
    latest_block_height: int
    latest_block_time: Optional[str] = None
    syncing: bool = False

    model_config = _MODEL_CONFIG


class StatusResponse(BaseModel):
    chain_id: str
    protocol_version: int = 0
    sync_info: SyncInfo
    version: Dict[str, Any] = Field(default_factory=dict)

    model_config = _MODEL_CONFIG


class GasPrice(BaseModel):
    gas_price: int

    model_config = _MODEL_CONFIG


class ExecutionOutcomeWithId(BaseModel):
    id: str
    block_hash: Optional[str] = None
    outcome: Dict[str, Any] = Field(default_factory=dict)

    model_config = _MODEL_CONFIG


class FinalExecutionOutcome(BaseModel):
    """
    Result of ``send_tx`` / ``tx_status``.

    ``status`` is ``{"SuccessValue": b64}``, ``{"SuccessReceiptId": id}``,
    ``{"Failure": {...}}`` or absent when the wait level returned before
    execution.
    """

    final_execution_status: TxExecutionStatus = TxExecutionStatus.NONE
    status: Optional[Union[Dict[str, Any], str]] = None
    transaction: Optional[Dict[str, Any]] = None
    transaction_outcome: Optional[ExecutionOutcomeWithId] = None
    receipts_outcome: List[ExecutionOutcomeWithId] = Field(default_factory=list)

    model_config = _MODEL_CONFIG

    def is_success(self) -> bool:
        return isinstance(self.status, dict) and (
            "SuccessValue" in self.status or "SuccessReceiptId" in self.status
        )

    def is_failure(self) -> bool:
        return isinstance(self.status, dict) and "Failure" in self.status

    def is_pending(self) -> bool:
        return self.final_execution_status in (
            TxExecutionStatus.NONE,
            TxExecutionStatus.INCLUDED,
            TxExecutionStatus.INCLUDED_FINAL,
        )

    def failure_message(self) -> Optional[str]:
        if not self.is_failure():
            return None
        return json.dumps(self.status["Failure"], sort_keys=True)

    @property
    def transaction_hash(self) -> Optional[str]:
        if self.transaction_outcome is not None:
            return self.transaction_outcome.id
        if self.transaction:
            return self.transaction.get("hash")
        return None

    def success_value(self) -> Optional[bytes]:
        """Decoded ``SuccessValue`` of the last receipt, if any."""
        if isinstance(self.status, dict) and "SuccessValue" in self.status:
            return base64.b64decode(self.status["SuccessValue"] or "")
        return None

    def as_json(self) -> Any:
        value = self.success_value()
        if not value:
            return None
        return json.loads(value.decode("utf-8"))

    def logs(self) -> List[str]:
        collected: List[str] = []
        outcomes = ([self.transaction_outcome] if self.transaction_outcome else []) + self.receipts_outcome
        for item in outcomes:
            collected.extend(item.outcome.get("logs", []))
        return collected
