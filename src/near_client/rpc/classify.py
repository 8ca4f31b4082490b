"""
Map JSON-RPC error envelopes onto the ``RpcError`` hierarchy.

Nodes report structured errors as
``{"code", "message", "data", "cause": {"name", "info"}}``. ``cause.name``
selects the error class; when it is absent or unknown, a few legacy string
forms in ``data`` are recognised before falling back to a generic
``RpcError`` carrying the raw code, message and data.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from ..runtime.errors import (
    AccessKeyNotFoundError,
    AccountNotFoundError,
    ContractExecutionError,
    ContractNotDeployedError,
    ContractStateTooLargeError,
    InvalidAccountError,
    InvalidNonceError,
    InvalidShardIdError,
    InvalidTransactionError,
    NodeNotSyncedError,
    ParseAccountIdError,
    RequestTimeoutError,
    RpcError,
    RpcInternalError,
    RpcParseError,
    ShardUnavailableError,
    UnknownBlockError,
    UnknownChunkError,
    UnknownEpochError,
    UnknownReceiptError,
)
from ..types.account import AccountId

logger = logging.getLogger(__name__)


def _valid_account(value: Any) -> Optional[AccountId]:
    if not isinstance(value, str):
        return None
    try:
        return AccountId(value)
    except ParseAccountIdError:
        return None


def _first(info: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if info.get(key) is not None:
            return info[key]
    return None


def extract_invalid_nonce(data: Any) -> Optional[InvalidNonceError]:
    """
    Find ``InvalidNonce {ak_nonce, tx_nonce}`` in transaction error data.

    Accepts both ``TxExecutionError.InvalidTxError.InvalidNonce`` and a bare
    ``InvalidTxError.InvalidNonce``.
    """
    if not isinstance(data, dict):
        return None
    invalid_tx = None
    tx_exec = data.get("TxExecutionError")
    if isinstance(tx_exec, dict):
        invalid_tx = tx_exec.get("InvalidTxError")
    if invalid_tx is None:
        invalid_tx = data.get("InvalidTxError")
    if not isinstance(invalid_tx, dict):
        return None
    nonce = invalid_tx.get("InvalidNonce")
    if not isinstance(nonce, dict):
        return None
    ak_nonce = nonce.get("ak_nonce")
    tx_nonce = nonce.get("tx_nonce")
    if not isinstance(ak_nonce, int) or not isinstance(tx_nonce, int):
        return None
    return InvalidNonceError(tx_nonce=tx_nonce, ak_nonce=ak_nonce)


def _from_cause(name: str, info: Dict[str, Any], message: str, data: Any) -> Optional[RpcError]:
    if name == "UNKNOWN_ACCOUNT":
        account = _valid_account(info.get("requested_account_id"))
        return AccountNotFoundError(account) if account else None

    if name == "INVALID_ACCOUNT":
        return InvalidAccountError(str(info.get("requested_account_id") or "unknown"))

    if name == "UNKNOWN_ACCESS_KEY":
        account = _valid_account(info.get("requested_account_id"))
        public_key = info.get("public_key")
        if account and isinstance(public_key, str):
            return AccessKeyNotFoundError(account, public_key)
        return None

    if name == "UNKNOWN_BLOCK":
        return UnknownBlockError(data if isinstance(data, str) else message)

    if name == "UNKNOWN_CHUNK":
        return UnknownChunkError(str(info.get("chunk_hash") or message))

    if name == "UNKNOWN_EPOCH":
        return UnknownEpochError(data if isinstance(data, str) else message)

    if name == "UNKNOWN_RECEIPT":
        return UnknownReceiptError(str(info.get("receipt_id") or "unknown"))

    if name == "NO_CONTRACT_CODE":
        account = _valid_account(_first(info, "contract_account_id", "account_id", "contract_id"))
        return ContractNotDeployedError(account) if account else None

    if name == "TOO_LARGE_CONTRACT_STATE":
        account = _valid_account(_first(info, "account_id", "contract_id"))
        return ContractStateTooLargeError(account) if account else None

    if name == "CONTRACT_EXECUTION_ERROR":
        contract = _valid_account(info.get("contract_id"))
        if contract:
            return ContractExecutionError(contract, info.get("method_name"), message)
        return None

    if name == "UNAVAILABLE_SHARD":
        return ShardUnavailableError(message)

    if name in ("NO_SYNCED_BLOCKS", "NOT_SYNCED_YET"):
        return NodeNotSyncedError(message)

    if name == "INVALID_SHARD_ID":
        shard_id = info.get("shard_id")
        return InvalidShardIdError(str(shard_id) if shard_id is not None else "unknown")

    if name == "INVALID_TRANSACTION":
        nonce_error = extract_invalid_nonce(data)
        if nonce_error is not None:
            return nonce_error
        details = data if isinstance(data, dict) else None
        return InvalidTransactionError(
            message,
            details=details,
            shard_congested=bool(details and details.get("ShardCongested") is True),
            shard_stuck=bool(details and details.get("ShardStuck") is True),
        )

    if name == "TIMEOUT_ERROR":
        tx_hash = info.get("transaction_hash")
        return RequestTimeoutError(message, tx_hash if isinstance(tx_hash, str) else None)

    if name == "PARSE_ERROR":
        return RpcParseError(message)

    if name == "INTERNAL_ERROR":
        return RpcInternalError(message)

    return None


def parse_rpc_error(error: Dict[str, Any]) -> RpcError:
    """
    Classify a JSON-RPC ``error`` object.

    Args:
        error: The ``error`` member of a JSON-RPC response

    Returns:
        The most specific ``RpcError`` subclass that applies
    """
    code = error.get("code")
    message = error.get("message") or "Unknown error"
    data = error.get("data")
    cause = error.get("cause")

    if isinstance(cause, dict) and isinstance(cause.get("name"), str):
        info = cause.get("info") if isinstance(cause.get("info"), dict) else {}
        classified = _from_cause(cause["name"], info, message, data)
        if classified is not None:
            classified.rpc_code = code
            classified.data = data
            return classified
        logger.debug(f"Unclassified RPC error cause {cause['name']}")

    # Older nodes: "account X does not exist while viewing"
    if isinstance(data, str) and "does not exist" in data and data.startswith("account "):
        words = data[len("account "):].split()
        account = _valid_account(words[0]) if words else None
        if account:
            error_obj = AccountNotFoundError(account)
            error_obj.rpc_code = code
            error_obj.data = data
            return error_obj

    return RpcError(message, rpc_code=code, data=data)


def view_function_error(account_id: str, method_name: str, message: str) -> RpcError:
    """
    Classify the ``error`` string a ``call_function`` query can return
    inside an otherwise successful result.
    """
    if "CodeDoesNotExist" in message:
        return ContractNotDeployedError(account_id)
    if "MethodNotFound" in message or "MethodResolveError" in message:
        return ContractExecutionError(account_id, method_name, f"Method not found: {method_name}")
    return ContractExecutionError(account_id, method_name, message)
