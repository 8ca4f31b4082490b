"""
NEAR Binary Codec Module

Canonical (Borsh) encoding primitives and the hashes computed over them.

Key components:
- writer.py: BorshWriter, append-only encoder
- reader.py: BorshReader, sequential decoder
- hashes.py: SHA-256 and Keccak-256 helpers
"""

from .hashes import keccak256, sha256
from .reader import BorshReader
from .writer import BorshWriter

__all__ = [
    "BorshReader",
    "BorshWriter",
    "keccak256",
    "sha256",
]
