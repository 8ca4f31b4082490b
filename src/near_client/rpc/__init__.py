"""
JSON-RPC transport: client, retry policy and error classification.
"""

from .classify import extract_invalid_nonce, parse_rpc_error
from .client import MAINNET_RPC_URL, NETWORKS, TESTNET_RPC_URL, RpcClient
from .retry import RetryConfig, execute_with_retry

__all__ = [
    "MAINNET_RPC_URL",
    "NETWORKS",
    "RetryConfig",
    "RpcClient",
    "TESTNET_RPC_URL",
    "execute_with_retry",
    "extract_invalid_nonce",
    "parse_rpc_error",
]
