"""
Transaction composition, submission and delegate (meta-transaction) signing.
"""

from .builder import (
    DEFAULT_BLOCK_HEIGHT_OFFSET,
    MAX_NONCE_RETRIES,
    CallBuilder,
    DelegateOptions,
    DelegateResult,
    TransactionBuilder,
)

__all__ = [
    "CallBuilder",
    "DEFAULT_BLOCK_HEIGHT_OFFSET",
    "DelegateOptions",
    "DelegateResult",
    "MAX_NONCE_RETRIES",
    "TransactionBuilder",
]
