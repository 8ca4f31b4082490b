"""
Transactions and signed transactions.

A transaction is encoded as
``signer_id || public_key || u64 nonce || receiver_id || block_hash[32] || vec<action>``.
Its hash, sha256 of that encoding, is the signing input.
"""

from __future__ import annotations
import base64
from dataclasses import dataclass
from typing import Tuple

from ..codec import BorshReader, BorshWriter
from ..crypto.keys import PublicKey, Signature
from .account import AccountId
from .actions import Action
from .hash import CryptoHash


@dataclass(frozen=True)
class Transaction:
    signer_id: AccountId
    public_key: PublicKey
    nonce: int
    receiver_id: AccountId
    block_hash: CryptoHash
    actions: Tuple[Action, ...]

    def __post_init__(self):
        object.__setattr__(self, "signer_id", AccountId(self.signer_id))
        object.__setattr__(self, "receiver_id", AccountId(self.receiver_id))
        object.__setattr__(self, "public_key", PublicKey.coerce(self.public_key))
        object.__setattr__(self, "block_hash", CryptoHash.coerce(self.block_hash))
        object.__setattr__(self, "actions", tuple(self.actions))

    def encode(self, w: BorshWriter) -> None:
        w.string(self.signer_id)
        self.public_key.encode(w)
        w.u64(self.nonce)
        w.string(self.receiver_id)
        self.block_hash.encode(w)
        w.vec(self.actions, lambda w_, a: a.encode(w_))

    @classmethod
    def decode(cls, r: BorshReader) -> Transaction:
        return cls(
            signer_id=AccountId(r.string()),
            public_key=PublicKey.decode(r),
            nonce=r.u64(),
            receiver_id=AccountId(r.string()),
            block_hash=CryptoHash.decode(r),
            actions=tuple(r.vec(Action.decode)),
        )

    def to_bytes(self) -> bytes:
        w = BorshWriter()
        self.encode(w)
        return w.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> Transaction:
        r = BorshReader(data)
        tx = cls.decode(r)
        r.expect_eof()
        return tx

    def get_hash(self) -> CryptoHash:
        """sha256 of the canonical encoding; what the signer signs."""
        return CryptoHash.of(self.to_bytes())

    def get_hash_and_size(self) -> Tuple[CryptoHash, int]:
        data = self.to_bytes()
        return CryptoHash.of(data), len(data)


@dataclass(frozen=True)
class SignedTransaction:
    transaction: Transaction
    signature: Signature

    def encode(self, w: BorshWriter) -> None:
        self.transaction.encode(w)
        self.signature.encode(w)

    def to_bytes(self) -> bytes:
        w = BorshWriter()
        self.encode(w)
        return w.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> SignedTransaction:
        r = BorshReader(data)
        signed = cls(Transaction.decode(r), Signature.decode(r))
        r.expect_eof()
        return signed

    def to_base64(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")

    @classmethod
    def from_base64(cls, data: str) -> SignedTransaction:
        return cls.from_bytes(base64.b64decode(data))

    def get_hash(self) -> CryptoHash:
        """Transaction hash, as reported by the node."""
        return self.transaction.get_hash()

    def verify(self) -> bool:
        return self.transaction.public_key.verify(bytes(self.get_hash()), self.signature)
