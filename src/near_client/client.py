"""
Top-level client.

``Near`` ties one ``RpcClient``, one ``NonceManager`` and an optional
default signer together. Handles made with ``with_signer`` share the RPC
session and nonce cache of the client they came from.

Example:
    ```python
    config = ClientConfig(network="testnet")
    signer = InMemorySigner("alice.testnet", "ed25519:...")

    async with Near(config, signer) as near:
        await near.transfer("bob.testnet", "1 NEAR")
        result = await near.view_function("counter.testnet", "get_count")
        print(result.as_json())
    ```
"""

from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .nep413 import SignedMessage, SignMessageParams
from .nonce_manager import NonceManager
from .rpc.client import NETWORKS, RpcClient
from .rpc.retry import RetryConfig
from .runtime.errors import ConfigError, NoSignerError
from .signers.signer import Signer
from .tx.builder import AmountLike, CallBuilder, TransactionBuilder
from .types.account import AccountId
from .types.block_reference import TxExecutionStatus
from .types.views import AccountView, FinalExecutionOutcome, ViewFunctionResult

logger = logging.getLogger(__name__)


@dataclass
class ClientConfig:
    """
    Client configuration.

    Attributes:
        network: "mainnet" or "testnet"; ignored when ``rpc_url`` is set
        rpc_url: Explicit node endpoint
        timeout: Per-request timeout in seconds
        retry: Retry settings for every RPC call
        headers: Extra HTTP headers, e.g. an API key
        default_wait_until: Wait level for ``send`` unless overridden
    """
    network: str = "testnet"
    rpc_url: Optional[str] = None
    timeout: float = 30.0
    retry: RetryConfig = field(default_factory=RetryConfig)
    headers: Dict[str, str] = field(default_factory=dict)
    default_wait_until: TxExecutionStatus = TxExecutionStatus.EXECUTED_OPTIMISTIC

    def resolve_url(self) -> str:
        """
        Endpoint to connect to.

        Raises:
            ConfigError: If ``network`` is unknown and no ``rpc_url`` is set
        """
        if self.rpc_url:
            return self.rpc_url
        try:
            return NETWORKS[self.network]
        except KeyError:
            raise ConfigError(
                f"Unknown network {self.network!r}; set rpc_url or use one of {sorted(NETWORKS)}",
                details={"network": self.network},
            )

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> ClientConfig:
        """Read ``NEAR_NETWORK`` and ``NEAR_RPC_URL``; unset values keep their defaults."""
        environ = os.environ if environ is None else environ
        config = cls()
        if environ.get("NEAR_NETWORK"):
            config.network = environ["NEAR_NETWORK"]
        if environ.get("NEAR_RPC_URL"):
            config.rpc_url = environ["NEAR_RPC_URL"]
        return config

    @classmethod
    def mainnet(cls) -> ClientConfig:
        return cls(network="mainnet")

    @classmethod
    def testnet(cls) -> ClientConfig:
        return cls(network="testnet")


class Near:
    """Entry point for queries and transactions against one network."""

    def __init__(self, config: Optional[ClientConfig] = None, signer: Optional[Signer] = None,
                 *, rpc: Optional[RpcClient] = None, nonce_manager: Optional[NonceManager] = None):
        """
        Initialize the client.

        Args:
            config: Network, timeout and retry settings (default: testnet)
            signer: Default signer for transactions and message signing
            rpc: Existing RPC client to share instead of creating one
            nonce_manager: Existing nonce cache to share
        """
        self.config = config or ClientConfig()
        self._owns_rpc = rpc is None
        self.rpc = rpc or RpcClient(
            self.config.resolve_url(),
            retry_config=self.config.retry,
            timeout=self.config.timeout,
            headers=self.config.headers,
        )
        self.nonce_manager = nonce_manager or NonceManager()
        self.signer = signer
        logger.debug(f"Near client for {self.rpc.url}")

    async def __aenter__(self) -> Near:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_rpc:
            await self.rpc.close()

    @property
    def account_id(self) -> Optional[AccountId]:
        return self.signer.account_id if self.signer is not None else None

    def with_signer(self, signer: Signer) -> Near:
        """Handle using ``signer`` that shares this client's RPC session and nonce cache."""
        return Near(self.config, signer, rpc=self.rpc, nonce_manager=self.nonce_manager)

    # =========================================================================
    # Transactions
    # =========================================================================

    def transaction(self, receiver_id: Union[str, AccountId]) -> TransactionBuilder:
        return TransactionBuilder(self.rpc, self.signer, self.nonce_manager, receiver_id,
                                  self.config.default_wait_until)

    async def transfer(self, receiver_id: Union[str, AccountId], amount: AmountLike,
                       wait_until: Optional[TxExecutionStatus] = None) -> FinalExecutionOutcome:
        """Send NEAR from the signer's account."""
        builder = self.transaction(receiver_id).transfer(amount)
        if wait_until is not None:
            builder.wait_until(wait_until)
        return await builder.send()

    def call(self, contract_id: Union[str, AccountId], method_name: str) -> CallBuilder:
        """
        Start a single function-call transaction.

        Example:
            ```python
            await near.call("counter.testnet", "increment").args({"by": 1}).send()
            ```
        """
        return self.transaction(contract_id).call(method_name)

    # =========================================================================
    # Queries
    # =========================================================================

    async def view_function(self, contract_id: Union[str, AccountId], method_name: str,
                            args: Any = None, block=None) -> ViewFunctionResult:
        """
        Call a view method.

        Args:
            contract_id: Contract account
            method_name: View method
            args: JSON-serializable arguments, or raw ``bytes``
            block: Block reference (default: optimistic)
        """
        if args is None:
            raw = b""
        elif isinstance(args, (bytes, bytearray)):
            raw = bytes(args)
        else:
            raw = json.dumps(args, separators=(",", ":")).encode("utf-8")
        return await self.rpc.view_function(contract_id, method_name, raw, block)

    async def view_account(self, account_id: Union[str, AccountId], block=None) -> AccountView:
        return await self.rpc.view_account(account_id, block)

    # =========================================================================
    # Off-chain messages
    # =========================================================================

    async def sign_message(self, params: SignMessageParams) -> SignedMessage:
        """
        Sign a NEP-413 message with the default signer.

        Raises:
            NoSignerError: If no signer is configured
        """
        if self.signer is None:
            raise NoSignerError()
        return await self.signer.sign_nep413(params)

    def __repr__(self) -> str:
        return f"Near(url={self.rpc.url!r}, account={self.account_id!r})"
