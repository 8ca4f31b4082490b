"""
Delegate actions (meta-transactions).

The user signs a ``DelegateAction`` with their own key; a relayer wraps the
``SignedDelegateAction`` in a single ``Delegate`` action of its own
fee-paying transaction. The signing hash is
``sha256(u32le(DELEGATE_ACTION_PREFIX) || encoding)``, which can never collide
with a transaction hash.
"""

from __future__ import annotations
import base64
from dataclasses import dataclass
from typing import ClassVar, Tuple

from ..codec import BorshReader, BorshWriter, sha256
from ..crypto.keys import PublicKey, Signature
from ..runtime.errors import EncodingError
from .account import AccountId
from .actions import Action, ActionKind
from .hash import CryptoHash

# 2^30 + 366
DELEGATE_ACTION_PREFIX = 1073742190


def _decode_non_delegate(r: BorshReader) -> Action:
    action = Action.decode(r)
    if isinstance(action, Delegate):
        raise EncodingError("Delegate actions cannot be nested")
    return action


@dataclass(frozen=True)
class DelegateAction:
    sender_id: AccountId
    receiver_id: AccountId
    actions: Tuple[Action, ...]
    nonce: int
    max_block_height: int
    public_key: PublicKey

    def __post_init__(self):
        object.__setattr__(self, "sender_id", AccountId(self.sender_id))
        object.__setattr__(self, "receiver_id", AccountId(self.receiver_id))
        object.__setattr__(self, "public_key", PublicKey.coerce(self.public_key))
        object.__setattr__(self, "actions", tuple(self.actions))
        if any(isinstance(a, Delegate) for a in self.actions):
            raise ValueError("Delegate actions cannot contain nested delegate actions")

    def encode(self, w: BorshWriter) -> None:
        w.string(self.sender_id)
        w.string(self.receiver_id)
        w.vec(self.actions, lambda w_, a: a.encode(w_))
        w.u64(self.nonce)
        w.u64(self.max_block_height)
        self.public_key.encode(w)

    @classmethod
    def decode(cls, r: BorshReader) -> DelegateAction:
        return cls(
            sender_id=AccountId(r.string()),
            receiver_id=AccountId(r.string()),
            actions=tuple(r.vec(_decode_non_delegate)),
            nonce=r.u64(),
            max_block_height=r.u64(),
            public_key=PublicKey.decode(r),
        )

    def to_bytes(self) -> bytes:
        w = BorshWriter()
        self.encode(w)
        return w.to_bytes()

    def get_hash(self) -> CryptoHash:
        """Hash the user signs."""
        w = BorshWriter()
        w.u32(DELEGATE_ACTION_PREFIX)
        self.encode(w)
        return CryptoHash(sha256(w.to_bytes()))


@dataclass(frozen=True)
class SignedDelegateAction:
    delegate_action: DelegateAction
    signature: Signature

    def encode(self, w: BorshWriter) -> None:
        self.delegate_action.encode(w)
        self.signature.encode(w)

    @classmethod
    def decode(cls, r: BorshReader) -> SignedDelegateAction:
        return cls(DelegateAction.decode(r), Signature.decode(r))

    @property
    def sender_id(self) -> AccountId:
        return self.delegate_action.sender_id

    @property
    def receiver_id(self) -> AccountId:
        return self.delegate_action.receiver_id

    def to_bytes(self) -> bytes:
        w = BorshWriter()
        self.encode(w)
        return w.to_bytes()

    @classmethod
    def from_bytes(cls, data: bytes) -> SignedDelegateAction:
        r = BorshReader(data)
        signed = cls.decode(r)
        r.expect_eof()
        return signed

    def to_base64(self) -> str:
        return base64.b64encode(self.to_bytes()).decode("ascii")

    @classmethod
    def from_base64(cls, data: str) -> SignedDelegateAction:
        return cls.from_bytes(base64.b64decode(data))

    def verify(self) -> bool:
        da = self.delegate_action
        return da.public_key.verify(bytes(da.get_hash()), self.signature)


@dataclass(frozen=True)
class Delegate(Action):
    """Outer action a relayer submits on behalf of the delegate's sender."""

    signed_delegate_action: SignedDelegateAction

    KIND: ClassVar[ActionKind] = ActionKind.DELEGATE

    def _encode_fields(self, w: BorshWriter) -> None:
        self.signed_delegate_action.encode(w)

    @classmethod
    def _decode_fields(cls, r: BorshReader) -> Delegate:
        return cls(SignedDelegateAction.decode(r))
