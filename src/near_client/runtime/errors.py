"""
NEAR Client Error Model

This module provides the error handling framework for the NEAR Python client:
local parse and encoding failures, signer and key store failures, the
structured RPC error taxonomy, and transaction-level errors.
"""

from __future__ import annotations
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Error codes grouped by failure domain."""

    # General errors (1-99)
    UNKNOWN = 1
    CONFIG = 2
    NO_SIGNER = 3

    # Parse errors (100-199)
    INVALID_ACCOUNT_ID = 100
    INVALID_AMOUNT = 101
    INVALID_GAS = 102
    INVALID_KEY = 103
    INVALID_HASH = 104
    ENCODING_ERROR = 110

    # Transport and RPC errors (200-299)
    NETWORK_ERROR = 200
    TIMEOUT = 201
    HTTP_ERROR = 202
    INVALID_RESPONSE = 203
    RPC_ERROR = 204
    ACCOUNT_NOT_FOUND = 210
    INVALID_ACCOUNT = 211
    ACCESS_KEY_NOT_FOUND = 212
    UNKNOWN_BLOCK = 213
    UNKNOWN_CHUNK = 214
    UNKNOWN_EPOCH = 215
    UNKNOWN_RECEIPT = 216
    CONTRACT_NOT_DEPLOYED = 217
    CONTRACT_STATE_TOO_LARGE = 218
    CONTRACT_EXECUTION = 219
    SHARD_UNAVAILABLE = 220
    NODE_NOT_SYNCED = 221
    INVALID_SHARD_ID = 222
    INVALID_TRANSACTION = 223
    INVALID_NONCE = 224
    REQUEST_TIMEOUT = 225
    PARSE_ERROR = 226
    INTERNAL_ERROR = 227

    # Signer errors (300-349)
    INVALID_SEED_PHRASE = 300
    SIGNING_FAILED = 301
    KEY_DERIVATION_FAILED = 302

    # Key store errors (350-399)
    KEY_NOT_FOUND = 350
    INVALID_KEY_FORMAT = 351
    PLATFORM_UNAVAILABLE = 352

    # Transaction errors (400-499)
    TRANSACTION_BUILD = 400
    TRANSACTION_FAILED = 401


class NearError(Exception):
    """
    Base class for all NEAR client errors.

    Provides structured error information: a stable code, a message,
    free-form details and the underlying cause.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize a NEAR client error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        """String representation of the error."""
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


# ---------------------------------------------------------------------------
# Parse errors
# ---------------------------------------------------------------------------

class ParseError(NearError, ValueError):
    """Malformed user input. Never retryable."""


class ParseAccountIdError(ParseError):
    """Invalid account identifier."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INVALID_ACCOUNT_ID, details)


class ParseAmountError(ParseError):
    """Invalid token amount string."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INVALID_AMOUNT, details)


class ParseGasError(ParseError):
    """Invalid gas string."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INVALID_GAS, details)


class ParseKeyError(ParseError):
    """Invalid public key, secret key or signature."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INVALID_KEY, details)


class ParseHashError(ParseError):
    """Invalid 32-byte hash."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.INVALID_HASH, details)


class EncodingError(NearError):
    """Malformed canonical bytes."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.ENCODING_ERROR, details, cause)


# ---------------------------------------------------------------------------
# Signer and key store errors
# ---------------------------------------------------------------------------

class SignerError(NearError):
    """Base exception for signer operations."""


class InvalidSeedPhraseError(SignerError):
    """Seed phrase failed BIP-39 validation."""

    def __init__(self, message: str = "Invalid seed phrase", cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_SEED_PHRASE, cause=cause)


class SigningFailedError(SignerError):
    """Signing could not be performed."""

    def __init__(self, message: str = "Signing failed", cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.SIGNING_FAILED, cause=cause)


class KeyDerivationError(SignerError):
    """HD key derivation failed."""

    def __init__(self, message: str = "Key derivation failed", cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.KEY_DERIVATION_FAILED, cause=cause)


class KeyStoreError(SignerError):
    """Key store specific errors."""


class KeyNotFoundError(KeyStoreError):
    """No key stored for the requested account."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.KEY_NOT_FOUND, details, cause)


class InvalidKeyFormatError(KeyStoreError):
    """Stored key record could not be understood."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_KEY_FORMAT, details, cause)


class PlatformError(KeyStoreError):
    """Credential backend unavailable or failing."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.PLATFORM_UNAVAILABLE, details, cause)


# ---------------------------------------------------------------------------
# RPC errors
# ---------------------------------------------------------------------------

class RpcError(NearError):
    """
    JSON-RPC error.

    Used directly for causes with no dedicated class; carries the raw
    JSON-RPC code, message and data.
    """

    def __init__(self, message: str, rpc_code: Optional[int] = None, data: Any = None,
                 code: ErrorCode = ErrorCode.RPC_ERROR,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)
        self.rpc_code = rpc_code
        self.data = data

    def is_retryable(self) -> bool:
        """Check whether repeating the same request may succeed."""
        return self.code == ErrorCode.RPC_ERROR and self.rpc_code in (-32000, -32603)


class NetworkError(RpcError):
    """Transport-level failure."""

    def __init__(self, message: str, retryable: bool = True, cause: Optional[Exception] = None):
        super().__init__(message, code=ErrorCode.NETWORK_ERROR, cause=cause)
        self.retryable = retryable

    def is_retryable(self) -> bool:
        return self.retryable


class HttpError(RpcError):
    """Non-200 HTTP status."""

    def __init__(self, status: int, body: str = ""):
        super().__init__(f"HTTP {status}: {body[:200]}", code=ErrorCode.HTTP_ERROR,
                         details={"status": status})
        self.status = status

    def is_retryable(self) -> bool:
        return self.status in (408, 429) or 500 <= self.status < 600


class RpcTimeoutError(RpcError):
    """All retry attempts were exhausted."""

    def __init__(self, attempts: int, last_error: Optional[Exception] = None):
        super().__init__(f"Request failed after {attempts} attempts",
                         code=ErrorCode.TIMEOUT, details={"attempts": attempts},
                         cause=last_error)
        self.attempts = attempts

    def is_retryable(self) -> bool:
        return True


class InvalidResponseError(RpcError):
    """Response body was not a usable JSON-RPC envelope."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message, code=ErrorCode.INVALID_RESPONSE, cause=cause)


class AccountNotFoundError(RpcError):
    """Account does not exist."""

    def __init__(self, account_id: str):
        super().__init__(f"Account not found: {account_id}", code=ErrorCode.ACCOUNT_NOT_FOUND)
        self.account_id = account_id


class InvalidAccountError(RpcError):
    """Account id rejected by the node."""

    def __init__(self, account_id: str):
        super().__init__(f"Invalid account: {account_id}", code=ErrorCode.INVALID_ACCOUNT)
        self.account_id = account_id


class AccessKeyNotFoundError(RpcError):
    """Access key does not exist on the account."""

    def __init__(self, account_id: str, public_key: str):
        super().__init__(f"Access key not found: {public_key} for account {account_id}",
                         code=ErrorCode.ACCESS_KEY_NOT_FOUND)
        self.account_id = account_id
        self.public_key = public_key


class UnknownBlockError(RpcError):
    """Block not found or garbage-collected."""

    def __init__(self, reference: str):
        super().__init__(f"Unknown block: {reference}", code=ErrorCode.UNKNOWN_BLOCK)
        self.reference = reference


class UnknownChunkError(RpcError):
    """Chunk not found."""

    def __init__(self, chunk_hash: str):
        super().__init__(f"Unknown chunk: {chunk_hash}", code=ErrorCode.UNKNOWN_CHUNK)
        self.chunk_hash = chunk_hash


class UnknownEpochError(RpcError):
    """Epoch not found."""

    def __init__(self, message: str):
        super().__init__(f"Unknown epoch: {message}", code=ErrorCode.UNKNOWN_EPOCH)


class UnknownReceiptError(RpcError):
    """Receipt not found."""

    def __init__(self, receipt_id: str):
        super().__init__(f"Unknown receipt: {receipt_id}", code=ErrorCode.UNKNOWN_RECEIPT)
        self.receipt_id = receipt_id


class ContractNotDeployedError(RpcError):
    """No contract code on the account."""

    def __init__(self, account_id: str):
        super().__init__(f"No contract deployed on account: {account_id}",
                         code=ErrorCode.CONTRACT_NOT_DEPLOYED)
        self.account_id = account_id


class ContractStateTooLargeError(RpcError):
    """Contract state exceeds the view limit."""

    def __init__(self, account_id: str):
        super().__init__(f"Contract state too large for account: {account_id}",
                         code=ErrorCode.CONTRACT_STATE_TOO_LARGE)
        self.account_id = account_id


class ContractExecutionError(RpcError):
    """Contract panicked or the method could not be resolved."""

    def __init__(self, contract_id: str, method_name: Optional[str], message: str):
        super().__init__(
            f"Contract execution failed on {contract_id}"
            f"{'.' + method_name if method_name else ''}: {message}",
            code=ErrorCode.CONTRACT_EXECUTION,
        )
        self.contract_id = contract_id
        self.method_name = method_name
        self.execution_message = message


class ShardUnavailableError(RpcError):
    """Node does not track the requested shard."""

    def __init__(self, message: str):
        super().__init__(f"Shard unavailable: {message}", code=ErrorCode.SHARD_UNAVAILABLE)

    def is_retryable(self) -> bool:
        return True


class NodeNotSyncedError(RpcError):
    """Node is still syncing."""

    def __init__(self, message: str):
        super().__init__(f"Node not synced: {message}", code=ErrorCode.NODE_NOT_SYNCED)

    def is_retryable(self) -> bool:
        return True


class InvalidShardIdError(RpcError):
    """Shard id does not exist."""

    def __init__(self, shard_id: str):
        super().__init__(f"Invalid shard ID: {shard_id}", code=ErrorCode.INVALID_SHARD_ID)
        self.shard_id = shard_id


class InvalidTransactionError(RpcError):
    """Transaction rejected by the node."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 shard_congested: bool = False, shard_stuck: bool = False):
        super().__init__(f"Invalid transaction: {message}", code=ErrorCode.INVALID_TRANSACTION,
                         details=details)
        self.shard_congested = shard_congested
        self.shard_stuck = shard_stuck

    def is_retryable(self) -> bool:
        return self.shard_congested or self.shard_stuck


class InvalidNonceError(RpcError):
    """Transaction nonce not above the access key nonce."""

    def __init__(self, tx_nonce: int, ak_nonce: int):
        super().__init__(f"Invalid nonce: transaction nonce {tx_nonce} must be greater "
                         f"than access key nonce {ak_nonce}",
                         code=ErrorCode.INVALID_NONCE,
                         details={"tx_nonce": tx_nonce, "ak_nonce": ak_nonce})
        self.tx_nonce = tx_nonce
        self.ak_nonce = ak_nonce

    def is_retryable(self) -> bool:
        return True


class RequestTimeoutError(RpcError):
    """Node timed out waiting for the transaction."""

    def __init__(self, message: str, transaction_hash: Optional[str] = None):
        super().__init__(f"Request timeout: {message}", code=ErrorCode.REQUEST_TIMEOUT,
                         details={"transaction_hash": transaction_hash} if transaction_hash else None)
        self.transaction_hash = transaction_hash

    def is_retryable(self) -> bool:
        return True


class RpcParseError(RpcError):
    """Node could not parse the request."""

    def __init__(self, message: str):
        super().__init__(f"Parse error: {message}", code=ErrorCode.PARSE_ERROR)


class RpcInternalError(RpcError):
    """Internal node error."""

    def __init__(self, message: str):
        super().__init__(f"Internal error: {message}", code=ErrorCode.INTERNAL_ERROR)

    def is_retryable(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Client and transaction errors
# ---------------------------------------------------------------------------

class ConfigError(NearError):
    """Invalid client configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CONFIG, details)


class NoSignerError(NearError):
    """Operation requires a signer but none is configured."""

    def __init__(self, message: str = "No signer configured. Use with_signer() or pass signer="):
        super().__init__(message, ErrorCode.NO_SIGNER)


class TransactionBuildError(NearError):
    """Transaction could not be assembled."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.TRANSACTION_BUILD, details)


class TransactionFailedError(NearError):
    """Transaction was executed and failed."""

    def __init__(self, message: str, outcome: Any = None):
        super().__init__(f"Transaction failed: {message}", ErrorCode.TRANSACTION_FAILED)
        self.outcome = outcome


class ErrorHandler:
    """
    Utility class for handling and categorizing errors.
    """

    @staticmethod
    def is_retryable(error: Exception) -> bool:
        """
        Check if an error is retryable.

        Args:
            error: Exception to check

        Returns:
            True if the error should be retried
        """
        if isinstance(error, RpcError):
            return error.is_retryable()
        return False

    @staticmethod
    def should_resend(error: Exception) -> bool:
        """
        Check if the same request should be sent again unchanged.

        An invalid nonce is recoverable, but only by re-signing with a new
        nonce, so resending identical bytes is pointless.

        Args:
            error: Exception to check

        Returns:
            True if an identical retry may succeed
        """
        return ErrorHandler.is_retryable(error) and not isinstance(error, InvalidNonceError)

    @staticmethod
    def extract_tx_hash(error: Exception) -> Optional[str]:
        """
        Extract transaction hash from error details if available.

        Args:
            error: Exception to examine

        Returns:
            Transaction hash if found
        """
        if isinstance(error, NearError) and error.details:
            return error.details.get("transaction_hash")
        return None


__all__ = [
    "ErrorCode",
    "NearError",
    "ParseError",
    "ParseAccountIdError",
    "ParseAmountError",
    "ParseGasError",
    "ParseKeyError",
    "ParseHashError",
    "EncodingError",
    "SignerError",
    "InvalidSeedPhraseError",
    "SigningFailedError",
    "KeyDerivationError",
    "KeyStoreError",
    "KeyNotFoundError",
    "InvalidKeyFormatError",
    "PlatformError",
    "RpcError",
    "NetworkError",
    "HttpError",
    "RpcTimeoutError",
    "InvalidResponseError",
    "AccountNotFoundError",
    "InvalidAccountError",
    "AccessKeyNotFoundError",
    "UnknownBlockError",
    "UnknownChunkError",
    "UnknownEpochError",
    "UnknownReceiptError",
    "ContractNotDeployedError",
    "ContractStateTooLargeError",
    "ContractExecutionError",
    "ShardUnavailableError",
    "NodeNotSyncedError",
    "InvalidShardIdError",
    "InvalidTransactionError",
    "InvalidNonceError",
    "RequestTimeoutError",
    "RpcParseError",
    "RpcInternalError",
    "ConfigError",
    "NoSignerError",
    "TransactionBuildError",
    "TransactionFailedError",
    "ErrorHandler",
]
