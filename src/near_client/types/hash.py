"""
32-byte hashes with base58 text form.
"""

from __future__ import annotations
from typing import Union

import base58

from ..codec import BorshReader, BorshWriter, sha256
from ..runtime.errors import ParseHashError


class CryptoHash(bytes):
    """A 32-byte SHA-256 digest. Renders as base58."""

    LENGTH = 32

    def __new__(cls, value: bytes):
        value = bytes(value)
        if len(value) != cls.LENGTH:
            raise ParseHashError(f"Hash must be {cls.LENGTH} bytes, got {len(value)}")
        return super().__new__(cls, value)

    @classmethod
    def of(cls, data: bytes) -> CryptoHash:
        return cls(sha256(data))

    @classmethod
    def from_string(cls, s: str) -> CryptoHash:
        try:
            raw = base58.b58decode(s)
        except ValueError as e:
            raise ParseHashError(f"Invalid base58 hash {s!r}: {e}")
        return cls(raw)

    @classmethod
    def coerce(cls, value: Union[str, bytes]) -> CryptoHash:
        if isinstance(value, CryptoHash):
            return value
        if isinstance(value, str):
            return cls.from_string(value)
        return cls(value)

    def encode(self, w: BorshWriter) -> None:
        w.fixed_bytes(self)

    @classmethod
    def decode(cls, r: BorshReader) -> CryptoHash:
        return cls(r.fixed_bytes(cls.LENGTH))

    def __str__(self) -> str:
        return base58.b58encode(bytes(self)).decode("ascii")

    def __repr__(self) -> str:
        return f"CryptoHash({self})"
