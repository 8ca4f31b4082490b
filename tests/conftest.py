"""
Shared fixtures: deterministic keys and signers, and RPC doubles.
"""

import base64
from unittest.mock import AsyncMock, Mock

import pytest

from near_client.crypto.keys import KeyPair, SecretKey
from near_client.nonce_manager import NonceManager
from near_client.signers import InMemorySigner
from near_client.types.hash import CryptoHash
from near_client.types.views import (
    AccessKeyView,
    BlockView,
    FinalExecutionOutcome,
    StatusResponse,
)

BLOCK_HASH = CryptoHash(bytes(range(32)))


@pytest.fixture
def secret_key():
    """Deterministic Ed25519 key."""
    return SecretKey(bytes(range(1, 33)))


@pytest.fixture
def key_pair(secret_key):
    return KeyPair(secret_key)


@pytest.fixture
def signer(secret_key):
    return InMemorySigner("alice.test", secret_key)


@pytest.fixture
def nonce_manager():
    return NonceManager()


def _success_outcome(value: bytes = b"") -> FinalExecutionOutcome:
    return FinalExecutionOutcome.model_validate({
        "final_execution_status": "EXECUTED_OPTIMISTIC",
        "status": {"SuccessValue": base64.b64encode(value).decode("ascii")},
        "transaction_outcome": {"id": "8pJ6vXxh1oTDr1xUf3vHoz7UmrZqSgY3jBYzEmEwzMJY", "outcome": {"logs": []}},
        "receipts_outcome": [],
    })


@pytest.fixture
def mock_rpc():
    """RpcClient double answering the calls a transaction send makes."""
    rpc = Mock()
    rpc.view_access_key = AsyncMock(return_value=AccessKeyView(nonce=41, permission="FullAccess"))
    rpc.block = AsyncMock(return_value=BlockView.model_validate(
        {"header": {"height": 1000, "hash": str(BLOCK_HASH)}}
    ))
    rpc.status = AsyncMock(return_value=StatusResponse.model_validate({
        "chain_id": "testnet",
        "sync_info": {"latest_block_hash": str(BLOCK_HASH), "latest_block_height": 5000},
    }))
    rpc.send_tx = AsyncMock(return_value=_success_outcome())
    return rpc


@pytest.fixture
def success_outcome():
    """Factory for a successful send_tx result."""
    return _success_outcome


@pytest.fixture
def failure_outcome():
    return FinalExecutionOutcome.model_validate({
        "final_execution_status": "EXECUTED_OPTIMISTIC",
        "status": {"Failure": {"ActionError": {"index": 0, "kind": {"AccountDoesNotExist": {"account_id": "bob.test"}}}}},
        "transaction_outcome": {"id": "8pJ6vXxh1oTDr1xUf3vHoz7UmrZqSgY3jBYzEmEwzMJY", "outcome": {"logs": []}},
        "receipts_outcome": [],
    })
