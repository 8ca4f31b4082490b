"""
Tests for JSON-RPC error classification.
"""

import pytest

from near_client.rpc import extract_invalid_nonce, parse_rpc_error
from near_client.rpc.classify import view_function_error
from near_client.runtime.errors import (
    AccessKeyNotFoundError,
    AccountNotFoundError,
    ContractExecutionError,
    ContractNotDeployedError,
    ContractStateTooLargeError,
    ErrorHandler,
    HttpError,
    InvalidAccountError,
    InvalidNonceError,
    InvalidShardIdError,
    InvalidTransactionError,
    NodeNotSyncedError,
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


def _error(name, info=None, message="Server error", data=None, code=-32000):
    return {
        "code": code,
        "message": message,
        "data": data,
        "cause": {"name": name, "info": info or {}},
    }


class TestParseRpcError:
    """Cause names map to specific error classes."""

    def test_unknown_account(self):
        error = parse_rpc_error(_error("UNKNOWN_ACCOUNT", {"requested_account_id": "ghost.testnet"}))
        assert isinstance(error, AccountNotFoundError)
        assert error.account_id == "ghost.testnet"
        assert error.rpc_code == -32000
        assert not error.is_retryable()

    def test_unknown_access_key(self):
        error = parse_rpc_error(_error("UNKNOWN_ACCESS_KEY", {
            "requested_account_id": "alice.testnet",
            "public_key": "ed25519:abc",
        }))
        assert isinstance(error, AccessKeyNotFoundError)
        assert error.account_id == "alice.testnet"
        assert error.public_key == "ed25519:abc"

    @pytest.mark.parametrize("name,info,expected", [
        ("INVALID_ACCOUNT", {"requested_account_id": "BAD"}, InvalidAccountError),
        ("UNKNOWN_BLOCK", {}, UnknownBlockError),
        ("UNKNOWN_CHUNK", {"chunk_hash": "abc"}, UnknownChunkError),
        ("UNKNOWN_EPOCH", {}, UnknownEpochError),
        ("UNKNOWN_RECEIPT", {"receipt_id": "r1"}, UnknownReceiptError),
        ("NO_CONTRACT_CODE", {"contract_account_id": "app.testnet"}, ContractNotDeployedError),
        ("TOO_LARGE_CONTRACT_STATE", {"account_id": "app.testnet"}, ContractStateTooLargeError),
        ("CONTRACT_EXECUTION_ERROR", {"contract_id": "app.testnet", "method_name": "go"}, ContractExecutionError),
        ("UNAVAILABLE_SHARD", {}, ShardUnavailableError),
        ("NO_SYNCED_BLOCKS", {}, NodeNotSyncedError),
        ("NOT_SYNCED_YET", {}, NodeNotSyncedError),
        ("INVALID_SHARD_ID", {"shard_id": 9}, InvalidShardIdError),
        ("TIMEOUT_ERROR", {}, RequestTimeoutError),
        ("PARSE_ERROR", {}, RpcParseError),
        ("INTERNAL_ERROR", {}, RpcInternalError),
    ])
    def test_cause_mapping(self, name, info, expected):
        assert isinstance(parse_rpc_error(_error(name, info)), expected)

    @pytest.mark.parametrize("error_type,retryable", [
        (ShardUnavailableError, True),
        (NodeNotSyncedError, True),
        (RpcInternalError, True),
        (RequestTimeoutError, True),
        (AccountNotFoundError, False),
        (ContractExecutionError, False),
        (RpcParseError, False),
    ])
    def test_retryability(self, error_type, retryable):
        names = {
            ShardUnavailableError: ("UNAVAILABLE_SHARD", {}),
            NodeNotSyncedError: ("NO_SYNCED_BLOCKS", {}),
            RpcInternalError: ("INTERNAL_ERROR", {}),
            RequestTimeoutError: ("TIMEOUT_ERROR", {}),
            AccountNotFoundError: ("UNKNOWN_ACCOUNT", {"requested_account_id": "a.testnet"}),
            ContractExecutionError: ("CONTRACT_EXECUTION_ERROR", {"contract_id": "a.testnet"}),
            RpcParseError: ("PARSE_ERROR", {}),
        }
        name, info = names[error_type]
        assert ErrorHandler.is_retryable(parse_rpc_error(_error(name, info))) is retryable

    def test_timeout_carries_transaction_hash(self):
        error = parse_rpc_error(_error("TIMEOUT_ERROR", {"transaction_hash": "9xTx"}))
        assert error.transaction_hash == "9xTx"
        assert ErrorHandler.extract_tx_hash(error) == "9xTx"

    def test_unknown_block_uses_data_text(self):
        error = parse_rpc_error(_error("UNKNOWN_BLOCK", data="DB Not Found Error: BLOCK HEIGHT: 5"))
        assert error.reference == "DB Not Found Error: BLOCK HEIGHT: 5"

    def test_missing_account_info_falls_back(self):
        error = parse_rpc_error(_error("UNKNOWN_ACCOUNT", {}))
        assert type(error) is RpcError
        assert error.rpc_code == -32000

    def test_unrecognised_cause(self):
        error = parse_rpc_error(_error("SOMETHING_NEW", message="Brand new failure"))
        assert type(error) is RpcError
        assert "Brand new failure" in str(error)
        assert error.is_retryable()

    def test_legacy_account_message(self):
        error = parse_rpc_error({
            "code": -32000,
            "message": "Server error",
            "data": "account ghost.testnet does not exist while viewing",
        })
        assert isinstance(error, AccountNotFoundError)
        assert error.account_id == "ghost.testnet"

    def test_generic_error_keeps_envelope(self):
        error = parse_rpc_error({"code": -32601, "message": "Method not found", "data": "nope"})
        assert type(error) is RpcError
        assert error.rpc_code == -32601
        assert error.data == "nope"
        assert not error.is_retryable()


class TestInvalidTransaction:
    """Transaction rejection details."""

    def test_invalid_nonce_nested(self):
        data = {"TxExecutionError": {"InvalidTxError": {"InvalidNonce": {"ak_nonce": 50, "tx_nonce": 42}}}}
        error = parse_rpc_error(_error("INVALID_TRANSACTION", data=data))
        assert isinstance(error, InvalidNonceError)
        assert (error.tx_nonce, error.ak_nonce) == (42, 50)
        assert error.is_retryable()
        assert not ErrorHandler.should_resend(error)

    def test_invalid_nonce_bare(self):
        error = extract_invalid_nonce({"InvalidTxError": {"InvalidNonce": {"ak_nonce": 7, "tx_nonce": 7}}})
        assert error.ak_nonce == 7

    @pytest.mark.parametrize("data", [
        None,
        "InvalidNonce",
        {"InvalidTxError": "InvalidNonce"},
        {"InvalidTxError": {"InvalidNonce": {"ak_nonce": "5", "tx_nonce": 3}}},
        {"TxExecutionError": {"InvalidTxError": {"NotEnoughBalance": {}}}},
    ])
    def test_no_nonce_found(self, data):
        assert extract_invalid_nonce(data) is None

    def test_other_invalid_transaction(self):
        data = {"TxExecutionError": {"InvalidTxError": {"Expired": None}}}
        error = parse_rpc_error(_error("INVALID_TRANSACTION", data=data))
        assert isinstance(error, InvalidTransactionError)
        assert error.details == data
        assert not error.is_retryable()

    def test_shard_congestion_is_retryable(self):
        error = parse_rpc_error(_error("INVALID_TRANSACTION", data={"ShardCongested": True}))
        assert isinstance(error, InvalidTransactionError)
        assert error.shard_congested
        assert error.is_retryable()

    def test_shard_stuck_is_retryable(self):
        error = parse_rpc_error(_error("INVALID_TRANSACTION", data={"ShardStuck": True}))
        assert error.shard_stuck
        assert ErrorHandler.should_resend(error)


class TestViewFunctionError:
    """Errors embedded in call_function results."""

    def test_missing_code(self):
        error = view_function_error("app.testnet", "get", "wasm execution failed with error: CodeDoesNotExist")
        assert isinstance(error, ContractNotDeployedError)

    def test_panic(self):
        error = view_function_error("app.testnet", "get", "Smart contract panicked: boom")
        assert isinstance(error, ContractExecutionError)
        assert error.method_name == "get"
        assert "boom" in error.execution_message

    def test_missing_method(self):
        error = view_function_error(
            "app.testnet", "get", "wasm execution failed with error: MethodResolveError(MethodNotFound)"
        )
        assert isinstance(error, ContractExecutionError)
        assert error.method_name == "get"
        assert "Method not found" in error.execution_message


class TestHttpError:
    """Status-based retry decisions."""

    @pytest.mark.parametrize("status,retryable", [
        (408, True), (429, True), (500, True), (503, True),
        (400, False), (401, False), (404, False),
    ])
    def test_status(self, status, retryable):
        assert HttpError(status).is_retryable() is retryable
