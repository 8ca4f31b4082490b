"""
Hashing helpers for the canonical encoding.

SHA-256 is the transaction, delegate and message hash; Keccak-256 derives
deterministic account ids.
"""

import hashlib

from Crypto.Hash import keccak


def sha256(data: bytes) -> bytes:
    """
    Compute SHA-256 hash of bytes.

    Args:
        data: Bytes to hash

    Returns:
        32-byte SHA-256 digest
    """
    return hashlib.sha256(data).digest()


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 (pre-standard SHA-3) hash of bytes.

    Args:
        data: Bytes to hash

    Returns:
        32-byte Keccak-256 digest
    """
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()
