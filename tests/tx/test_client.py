"""
Tests for the top-level client and its configuration.
"""

from unittest.mock import AsyncMock

import pytest

from near_client import ClientConfig, Near
from near_client.nep413 import SignMessageParams, generate_nonce, verify_signature
from near_client.rpc import MAINNET_RPC_URL, TESTNET_RPC_URL, RetryConfig
from near_client.runtime.errors import ConfigError, NoSignerError
from near_client.tx import CallBuilder, TransactionBuilder
from near_client.types import Transfer
from near_client.types.block_reference import TxExecutionStatus
from near_client.types.views import ViewFunctionResult


class TestClientConfig:
    """Endpoint resolution."""

    def test_networks(self):
        assert ClientConfig().resolve_url() == TESTNET_RPC_URL
        assert ClientConfig.mainnet().resolve_url() == MAINNET_RPC_URL
        assert ClientConfig.testnet().network == "testnet"

    def test_explicit_url_wins(self):
        config = ClientConfig(network="nowhere", rpc_url="http://localhost:3030")
        assert config.resolve_url() == "http://localhost:3030"

    def test_unknown_network(self):
        with pytest.raises(ConfigError, match="Unknown network"):
            ClientConfig(network="devnet").resolve_url()

    def test_from_env(self):
        config = ClientConfig.from_env({"NEAR_NETWORK": "mainnet"})
        assert config.resolve_url() == MAINNET_RPC_URL
        config = ClientConfig.from_env({"NEAR_RPC_URL": "http://127.0.0.1:3030"})
        assert config.rpc_url == "http://127.0.0.1:3030"
        assert ClientConfig.from_env({}).network == "testnet"

    def test_from_process_env(self, monkeypatch):
        monkeypatch.setenv("NEAR_NETWORK", "mainnet")
        monkeypatch.delenv("NEAR_RPC_URL", raising=False)
        assert ClientConfig.from_env().network == "mainnet"


class TestNear:
    """Client wiring."""

    def test_rpc_built_from_config(self):
        retry = RetryConfig(max_retries=1)
        near = Near(ClientConfig(rpc_url="http://localhost:3030", timeout=5.0, retry=retry,
                                 headers={"x-api-key": "k"}))
        assert near.rpc.url == "http://localhost:3030"
        assert near.rpc.timeout == 5.0
        assert near.rpc.retry_config is retry
        assert near.rpc.headers == {"x-api-key": "k"}
        assert near.account_id is None

    def test_with_signer_shares_state(self, mock_rpc, signer):
        near = Near(rpc=mock_rpc)
        handle = near.with_signer(signer)
        assert handle.rpc is near.rpc
        assert handle.nonce_manager is near.nonce_manager
        assert handle.account_id == "alice.test"
        assert near.signer is None

    def test_builders(self, mock_rpc, signer):
        config = ClientConfig(default_wait_until=TxExecutionStatus.FINAL)
        near = Near(config, signer, rpc=mock_rpc)
        builder = near.transaction("bob.test")
        assert isinstance(builder, TransactionBuilder)
        assert builder.signer is signer
        assert isinstance(near.call("app.test", "go"), CallBuilder)

    @pytest.mark.asyncio
    async def test_transfer(self, mock_rpc, signer):
        near = Near(signer=signer, rpc=mock_rpc)
        outcome = await near.transfer("bob.test", "2 NEAR", wait_until=TxExecutionStatus.INCLUDED_FINAL)
        assert outcome.is_success()
        signed, wait_until = mock_rpc.send_tx.await_args.args
        (action,) = signed.transaction.actions
        assert isinstance(action, Transfer)
        assert wait_until is TxExecutionStatus.INCLUDED_FINAL

    @pytest.mark.asyncio
    async def test_handles_share_nonces(self, mock_rpc, signer):
        near = Near(rpc=mock_rpc)
        await near.with_signer(signer).transfer("bob.test", 1)
        await near.with_signer(signer).transfer("bob.test", 1)
        nonces = [c.args[0].transaction.nonce for c in mock_rpc.send_tx.await_args_list]
        assert nonces == [42, 43]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("args,expected", [
        (None, b""),
        (b"\x01\x02", b"\x01\x02"),
        ({"account_id": "bob.test"}, b'{"account_id":"bob.test"}'),
    ])
    async def test_view_function_args(self, mock_rpc, args, expected):
        mock_rpc.view_function = AsyncMock(return_value=ViewFunctionResult(result=list(b"1")))
        near = Near(rpc=mock_rpc)
        result = await near.view_function("app.test", "get", args)
        assert result.as_json() == 1
        assert mock_rpc.view_function.await_args.args == ("app.test", "get", expected, None)

    @pytest.mark.asyncio
    async def test_sign_message(self, mock_rpc, signer):
        near = Near(signer=signer, rpc=mock_rpc)
        params = SignMessageParams.new("hello", "app.example")
        signed = await near.sign_message(params)
        assert verify_signature(signed, params)

    @pytest.mark.asyncio
    async def test_sign_message_requires_signer(self, mock_rpc):
        with pytest.raises(NoSignerError):
            await Near(rpc=mock_rpc).sign_message(SignMessageParams("m", "r", generate_nonce()))

    @pytest.mark.asyncio
    async def test_shared_rpc_not_closed(self, mock_rpc):
        mock_rpc.close = AsyncMock()
        async with Near(rpc=mock_rpc):
            pass
        mock_rpc.close.assert_not_awaited()
