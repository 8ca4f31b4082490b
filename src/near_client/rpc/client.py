"""
Async JSON-RPC client for NEAR nodes.

Every call is retried per ``RetryConfig`` when the failure is transient
(connection failures and timeouts, 408/429/5xx, node-side timeouts, unsynced nodes,
congested shards). Node errors are classified into the ``RpcError``
hierarchy; see ``classify.parse_rpc_error``.
"""

from __future__ import annotations
import asyncio
import base64
import itertools
import json
import logging
from typing import Any, Dict, Optional, Tuple, Union

import aiohttp

from ..runtime.errors import HttpError, InvalidResponseError, NetworkError
from ..types.account import AccountId
from ..types.block_reference import BlockReference, TxExecutionStatus
from ..types.hash import CryptoHash
from ..types.transaction import SignedTransaction
from ..types.views import (
    AccessKeyListView,
    AccessKeyView,
    AccountView,
    BlockView,
    FinalExecutionOutcome,
    GasPrice,
    StatusResponse,
    ViewFunctionResult,
)
from .classify import parse_rpc_error, view_function_error
from .retry import RetryConfig, execute_with_retry

logger = logging.getLogger(__name__)

MAINNET_RPC_URL = "https://free.rpc.fastnear.com"
TESTNET_RPC_URL = "https://test.rpc.fastnear.com"

NETWORKS = {
    "mainnet": MAINNET_RPC_URL,
    "testnet": TESTNET_RPC_URL,
}

BlockLike = Union[None, BlockReference, int, str, CryptoHash]


class RpcClient:
    """
    JSON-RPC 2.0 client over a shared ``aiohttp`` session.

    Example:
        ```python
        async with RpcClient(TESTNET_RPC_URL) as rpc:
            account = await rpc.view_account("alice.testnet")
            print(account.amount)
        ```
    """

    def __init__(
        self,
        url: str,
        retry_config: Optional[RetryConfig] = None,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the client.

        Args:
            url: Node endpoint
            retry_config: Retry settings (default: 3 retries, 0.5s..5s backoff)
            timeout: Per-request timeout in seconds
            headers: Extra HTTP headers, e.g. an API key
            session: Optional session to share; not closed by this client
        """
        self.url = url
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._session = session
        self._owns_session = session is None
        self._request_ids = itertools.count(1)

    async def __aenter__(self) -> RpcClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if owned by this client."""
        if not self._owns_session or self._session is None:
            return
        if not self._session.closed:
            await self._session.close()
            logger.debug(f"Closed RPC session for {self.url}")
        self._session = None

    def clone(self) -> RpcClient:
        """Client for the same endpoint with its own session and request ids."""
        return RpcClient(self.url, self.retry_config, self.timeout, self.headers)

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout, trust_env=True)
            self._owns_session = True
            logger.debug(f"Created RPC session for {self.url}")
        return self._session

    # =========================================================================
    # Low-level RPC
    # =========================================================================

    async def _post(self, payload: Dict[str, Any]) -> Tuple[int, str]:
        """POST ``payload`` and return ``(status, body)``."""
        session = self._get_session()
        headers = {"Content-Type": "application/json", **self.headers}
        async with session.post(self.url, json=payload, headers=headers) as response:
            return response.status, await response.text()

    async def _try_call(self, method: str, params: Any) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._request_ids),
            "method": method,
            "params": params,
        }
        try:
            status, body = await self._post(payload)
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Request to {self.url} timed out", cause=e)
        except aiohttp.ClientConnectionError as e:
            raise NetworkError(f"Connection to {self.url} failed: {e}", cause=e)
        except aiohttp.ClientError as e:
            # bad URL, redirect loops, broken payloads: resending cannot help
            raise NetworkError(f"HTTP request failed: {e}", retryable=False, cause=e)

        if status != 200:
            raise HttpError(status, body)

        try:
            response = json.loads(body)
        except json.JSONDecodeError as e:
            raise InvalidResponseError(f"Invalid JSON response: {e}", cause=e)
        if not isinstance(response, dict):
            raise InvalidResponseError("JSON-RPC response is not an object")

        if response.get("error") is not None:
            raise parse_rpc_error(response["error"])

        if "result" not in response:
            raise InvalidResponseError("Missing result in response")
        return response["result"]

    async def call(self, method: str, params: Any = None) -> Any:
        """
        Make a raw JSON-RPC call with retries.

        Args:
            method: RPC method name (e.g. "query", "block")
            params: Method parameters

        Returns:
            The ``result`` member of the response

        Raises:
            RpcError: Classified node or transport error
            RpcTimeoutError: If every attempt failed transiently
        """
        logger.debug(f"RPC {method} -> {self.url}")
        return await execute_with_retry(
            lambda attempt: self._try_call(method, params),
            self.retry_config,
        )

    async def _query(self, request_type: str, block: BlockLike, **params: Any) -> Dict[str, Any]:
        body = {"request_type": request_type, **params}
        body.update(BlockReference.coerce(block).to_rpc_params())
        return await self.call("query", body)

    # =========================================================================
    # Queries
    # =========================================================================

    async def view_account(self, account_id: Union[str, AccountId],
                           block: BlockLike = None) -> AccountView:
        result = await self._query("view_account", block, account_id=str(AccountId(account_id)))
        return AccountView.model_validate(result)

    async def view_access_key(self, account_id: Union[str, AccountId], public_key,
                              block: BlockLike = None) -> AccessKeyView:
        result = await self._query(
            "view_access_key", block,
            account_id=str(AccountId(account_id)),
            public_key=str(public_key),
        )
        return AccessKeyView.model_validate(result)

    async def view_access_key_list(self, account_id: Union[str, AccountId],
                                   block: BlockLike = None) -> AccessKeyListView:
        result = await self._query("view_access_key_list", block,
                                   account_id=str(AccountId(account_id)))
        return AccessKeyListView.model_validate(result)

    async def view_function(self, account_id: Union[str, AccountId], method_name: str,
                            args: bytes = b"", block: BlockLike = None) -> ViewFunctionResult:
        """
        Call a contract view method.

        Raises:
            ContractNotDeployedError: If the account has no contract
            ContractExecutionError: If the method is missing or panics
        """
        account_id = AccountId(account_id)
        result = await self._query(
            "call_function", block,
            account_id=str(account_id),
            method_name=method_name,
            args_base64=base64.b64encode(args).decode("ascii"),
        )
        if isinstance(result, dict) and result.get("error"):
            raise view_function_error(account_id, method_name, str(result["error"]))
        return ViewFunctionResult.model_validate(result)

    async def block(self, block: BlockLike = None) -> BlockView:
        result = await self.call("block", BlockReference.coerce(block).to_rpc_params())
        return BlockView.model_validate(result)

    async def status(self) -> StatusResponse:
        result = await self.call("status", [])
        return StatusResponse.model_validate(result)

    async def gas_price(self, block_hash: Optional[CryptoHash] = None) -> GasPrice:
        params = [str(block_hash) if block_hash is not None else None]
        result = await self.call("gas_price", params)
        return GasPrice.model_validate(result)

    # =========================================================================
    # Transactions
    # =========================================================================

    async def send_tx(
        self,
        signed_tx: SignedTransaction,
        wait_until: TxExecutionStatus = TxExecutionStatus.EXECUTED_OPTIMISTIC,
    ) -> FinalExecutionOutcome:
        """
        Submit a signed transaction and wait up to ``wait_until``.

        Raises:
            InvalidNonceError: If the nonce is not above the access key nonce
            InvalidTransactionError: If the node rejects the transaction
        """
        params = {
            "signed_tx_base64": signed_tx.to_base64(),
            "wait_until": TxExecutionStatus(wait_until).value,
        }
        result = await self.call("send_tx", params)
        return FinalExecutionOutcome.model_validate(result)

    async def tx_status(
        self,
        tx_hash: Union[str, CryptoHash],
        sender_id: Union[str, AccountId],
        wait_until: TxExecutionStatus = TxExecutionStatus.EXECUTED_OPTIMISTIC,
    ) -> FinalExecutionOutcome:
        params = {
            "tx_hash": str(CryptoHash.coerce(tx_hash)),
            "sender_account_id": str(AccountId(sender_id)),
            "wait_until": TxExecutionStatus(wait_until).value,
        }
        result = await self.call("EXPERIMENTAL_tx_status", params)
        return FinalExecutionOutcome.model_validate(result)

    def __repr__(self) -> str:
        return f"RpcClient({self.url!r})"
